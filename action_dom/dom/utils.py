import re

from action_dom.dom.document import RenderedElement
from action_dom.dom.views import MAX_TEXT_LENGTH

_WHITESPACE_RE = re.compile(r'\s+')
_SVG_FALLBACK_TEXT = 'SVGs not supported by this browser.'
# '✱' is the heavy asterisk some form libraries use as a required marker
_REQUIRED_MARKERS = ('*', '✱', 'require')


def remove_multiple_spaces(text: str) -> str:
	if not text:
		return text
	return _WHITESPACE_RE.sub(' ', text)


def cleanup_text(text: str) -> str:
	return remove_multiple_spaces(text.replace(_SVG_FALLBACK_TEXT, '')).strip()


def cap_text_length(text: str, max_length: int) -> str:
	"""Cap text length for display."""
	if len(text) <= max_length:
		return text
	return text[:max_length] + '...'


def check_string_include_require(text: str) -> bool:
	lowered = text.lower()
	return any(marker in lowered for marker in _REQUIRED_MARKERS)


def get_after_content(element: RenderedElement) -> str:
	"""The `content` of the element's ::after pseudo element with quotes stripped."""
	style = element.computed_style('::after')
	if style is None:
		return ''
	content = style.get('content', '') or ''
	if content in ('none', 'normal'):
		return ''
	return content.replace('"', '')


def check_required_from_style(element: RenderedElement) -> bool:
	if check_string_include_require(get_after_content(element)):
		return True
	return 'require' in element.class_name.lower()


def get_element_content(element: RenderedElement, skipped_element: RenderedElement | None = None) -> str:
	"""
	Text of the element and its descendants, pieces joined with ';'.

	The skipped element (and its subtree) contributes nothing. When the result is
	longer than MAX_TEXT_LENGTH, only the element's own text nodes are used, or ''
	if those are too long as well.
	"""
	if skipped_element is not None and element.is_same_node(skipped_element):
		return ''

	child_nodes = element.child_nodes()
	node_content = ''
	if child_nodes:
		child_texts = []
		own_texts = []
		for child in child_nodes:
			if isinstance(child, str):
				child_text = child.strip()
				own_texts.append(child_text)
			else:
				child_text = get_element_content(child, skipped_element)
			if child_text:
				child_texts.append(child_text)
		text_content = ';'.join(child_texts)
		node_content = cleanup_text(';'.join(own_texts))
	else:
		text_content = element.text_content

	final_text = cleanup_text(text_content)
	if len(final_text) > MAX_TEXT_LENGTH:
		final_text = node_content if len(node_content) <= MAX_TEXT_LENGTH else ''
	return final_text


def get_element_context(element: RenderedElement, marker_attribute: str) -> str:
	"""
	Descriptive text around captured elements: the required marker of the ::after
	pseudo element, then the text of every subtree that was not captured itself.
	"""
	full_context = []

	after_content = get_after_content(element)
	lowered = after_content.lower()
	if '*' in lowered or 'require' in lowered:
		full_context.append(after_content)

	is_marked = element.has_attribute(marker_attribute)
	for child in element.child_nodes():
		child_context = ''
		if isinstance(child, str):
			if not is_marked:
				child_context = child.strip()
		elif not child.has_attribute(marker_attribute):
			child_context = get_element_context(child, marker_attribute)
		if child_context:
			full_context.append(child_context)

	return ';'.join(full_context)


def build_xpath(element: RenderedElement) -> str:
	"""Absolute XPath of the element, e.g. /html/body/div[2]/input."""
	return element.absolute_xpath()
