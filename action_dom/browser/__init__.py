from action_dom.browser.playwright_document import PlaywrightDocument, PlaywrightElement

__all__ = ['PlaywrightDocument', 'PlaywrightElement']
