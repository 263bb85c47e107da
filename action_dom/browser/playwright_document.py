# @file purpose: Binds the rendered document interface to a live Playwright page (sync API)
"""
Playwright binding.

Every query is a small script evaluated against the live element handle, so
results always reflect the page at call time. Playwright errors (detached
nodes, closed pages) surface as ElementAccessError.

The document owns every element handle it hands out and releases them in
dispose(), which the extraction pass calls when it ends.

	from playwright.sync_api import sync_playwright

	with sync_playwright() as p:
		page = p.chromium.launch().new_page()
		page.goto('https://example.com')
		structure = DomService(PlaywrightDocument(page)).extract()
"""

import logging
from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from playwright.sync_api import ElementHandle, JSHandle, Page
from playwright.sync_api import Error as PlaywrightError

from action_dom.dom.document import ChildNode, RenderedDocument, RenderedElement
from action_dom.dom.geometry import Rect
from action_dom.exceptions import ElementAccessError

logger = logging.getLogger(__name__)

P = ParamSpec('P')
R = TypeVar('R')

# Computed style properties read by the extraction engine
STYLE_PROPERTIES = ('display', 'visibility', 'float', 'position', 'font-size', 'cursor', 'content')

_ELEMENT_NODE = 1
_TEXT_NODE = 3


def translate_playwright_errors(func: Callable[P, R]) -> Callable[P, R]:
	@wraps(func)
	def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
		try:
			return func(*args, **kwargs)
		except PlaywrightError as e:
			raise ElementAccessError(f'{func.__name__} failed: {e.message}', {'function': func.__name__}) from e

	return wrapper


def _handles_from_array(array_handle: JSHandle) -> list[JSHandle]:
	"""Items of a JS array handle in index order."""
	properties = array_handle.get_properties()
	items = [(int(key), handle) for key, handle in properties.items() if key.isdigit()]
	array_handle.dispose()
	return [handle for _, handle in sorted(items, key=lambda item: item[0])]


class PlaywrightElement(RenderedElement):
	def __init__(self, handle: ElementHandle, document: 'PlaywrightDocument'):
		self.handle = handle
		self.document = document

	def __repr__(self) -> str:
		return f'PlaywrightElement({self.handle!r})'

	def _evaluate(self, expression: str, arg: Any = None) -> Any:
		return self.handle.evaluate(expression, arg)

	def _element_or_none(self, expression: str, arg: Any = None) -> 'PlaywrightElement | None':
		return self.document.wrap_or_dispose(self.handle.evaluate_handle(expression, arg))

	def _elements(self, expression: str, arg: Any = None) -> list['PlaywrightElement']:
		handles = _handles_from_array(self.handle.evaluate_handle(expression, arg))
		elements = [self.document.wrap_or_dispose(handle) for handle in handles]
		return [element for element in elements if element is not None]

	@property
	@translate_playwright_errors
	def tag_name(self) -> str:
		return self._evaluate('el => el.tagName.toLowerCase()')

	@property
	@translate_playwright_errors
	def parent(self) -> 'PlaywrightElement | None':
		return self._element_or_none('el => el.parentElement')

	@translate_playwright_errors
	def children(self) -> list[RenderedElement]:
		return list(self._elements('el => Array.from(el.children)'))

	@translate_playwright_errors
	def child_nodes(self) -> list[ChildNode]:
		handles = _handles_from_array(
			self.handle.evaluate_handle(
				'(el, types) => Array.from(el.childNodes).filter(n => types.includes(n.nodeType))',
				[_ELEMENT_NODE, _TEXT_NODE],
			)
		)
		nodes: list[ChildNode] = []
		for handle in handles:
			element = handle.as_element()
			if element is not None:
				nodes.append(self.document.wrap(element))
			else:
				nodes.append(handle.evaluate('n => n.data'))
				handle.dispose()
		return nodes

	@translate_playwright_errors
	def attributes(self) -> dict[str, str]:
		pairs = self._evaluate('el => Array.from(el.attributes).map(a => [a.name, a.value])')
		return {name: value for name, value in pairs}

	@translate_playwright_errors
	def get_attribute(self, name: str) -> str | None:
		return self.handle.get_attribute(name)

	@translate_playwright_errors
	def set_attribute(self, name: str, value: str) -> None:
		self._evaluate('(el, [name, value]) => el.setAttribute(name, value)', [name, value])

	@translate_playwright_errors
	def remove_attribute(self, name: str) -> None:
		self._evaluate('(el, name) => el.removeAttribute(name)', name)

	@translate_playwright_errors
	def computed_style(self, pseudo: str | None = None) -> Mapping[str, str] | None:
		return self._evaluate(
			"""(el, [pseudo, properties]) => {
				const view = el.ownerDocument.defaultView;
				if (!view) return null;
				const style = view.getComputedStyle(el, pseudo);
				return Object.fromEntries(properties.map(p => [p, style.getPropertyValue(p)]));
			}""",
			[pseudo, list(STYLE_PROPERTIES)],
		)

	@translate_playwright_errors
	def client_rects(self) -> list[Rect]:
		rects = self._evaluate(
			'el => Array.from(el.getClientRects()).map(r => ({top: r.top, left: r.left, right: r.right, bottom: r.bottom}))'
		)
		return [Rect.copy(rect) for rect in rects]

	@translate_playwright_errors
	def bounding_client_rect(self) -> Rect:
		rect = self._evaluate(
			'el => { const r = el.getBoundingClientRect(); return {top: r.top, left: r.left, right: r.right, bottom: r.bottom}; }'
		)
		return Rect.copy(rect)

	@translate_playwright_errors
	def check_visibility(self) -> bool:
		return self._evaluate('el => typeof el.checkVisibility === "function" ? el.checkVisibility() : true')

	@property
	@translate_playwright_errors
	def hidden(self) -> bool:
		return bool(self._evaluate('el => el.hidden'))

	@property
	@translate_playwright_errors
	def disabled(self) -> bool:
		return bool(self._evaluate('el => el.disabled'))

	@property
	@translate_playwright_errors
	def is_content_editable(self) -> bool:
		return bool(self._evaluate('el => el.isContentEditable'))

	@property
	@translate_playwright_errors
	def href(self) -> str:
		return self._evaluate('el => typeof el.href === "string" ? el.href : ""')

	@property
	@translate_playwright_errors
	def value(self) -> str | None:
		return self._evaluate('el => typeof el.value === "string" ? el.value : null')

	@property
	@translate_playwright_errors
	def text_content(self) -> str:
		return self._evaluate('el => el.textContent || ""')

	@translate_playwright_errors
	def label_control(self) -> 'PlaywrightElement | None':
		return self._element_or_none('el => el.control || null')

	@translate_playwright_errors
	def select_options(self) -> list[tuple[int, str]]:
		options = self._evaluate('el => Array.from(el.options || []).map(o => [o.index, o.textContent || ""])')
		return [(index, text) for index, text in options]

	@translate_playwright_errors
	def inline_style(self, prop: str) -> str:
		return self._evaluate('(el, prop) => el.style.getPropertyValue(prop)', prop)

	@translate_playwright_errors
	def set_inline_style(self, prop: str, value: str) -> None:
		self._evaluate('(el, [prop, value]) => el.style.setProperty(prop, value)', [prop, value])

	@translate_playwright_errors
	def remove_inline_style(self, prop: str) -> None:
		self._evaluate('(el, prop) => el.style.removeProperty(prop)', prop)

	@translate_playwright_errors
	def click(self) -> None:
		self._evaluate('el => el.click()')

	@translate_playwright_errors
	def press_key(self, key: str) -> None:
		self._evaluate(
			"(el, key) => el.dispatchEvent(new KeyboardEvent('keydown', {key, code: key, bubbles: true}))",
			key,
		)

	@translate_playwright_errors
	def query_selector_all(self, selector: str) -> list[RenderedElement]:
		return [self.document.wrap(handle) for handle in self.handle.query_selector_all(selector)]

	@translate_playwright_errors
	def is_same_node(self, other: RenderedElement | None) -> bool:
		if not isinstance(other, PlaywrightElement):
			return False
		return self._evaluate('(el, other) => el === other', other.handle)

	@translate_playwright_errors
	def previous_element_siblings(self) -> list[RenderedElement]:
		return list(
			self._elements(
				'el => { const s = []; for (let n = el.previousElementSibling; n; n = n.previousElementSibling) s.push(n); return s; }'
			)
		)

	@translate_playwright_errors
	def next_element_siblings(self) -> list[RenderedElement]:
		return list(
			self._elements('el => { const s = []; for (let n = el.nextElementSibling; n; n = n.nextElementSibling) s.push(n); return s; }')
		)

	@translate_playwright_errors
	def absolute_xpath(self) -> str:
		return self._evaluate(
			"""el => {
				const segments = [];
				for (let node = el; node; node = node.parentElement) {
					const tag = node.tagName.toLowerCase();
					const parent = node.parentElement;
					const sameTag = parent ? Array.from(parent.children).filter(c => c.tagName === node.tagName) : [node];
					segments.unshift(sameTag.length > 1 ? `${tag}[${sameTag.indexOf(node) + 1}]` : tag);
				}
				return '/' + segments.join('/');
			}"""
		)


class PlaywrightDocument(RenderedDocument):
	"""The main frame of a Playwright page."""

	def __init__(self, page: Page):
		self.page = page
		self._handles: list[JSHandle] = []

	@property
	def tracked_handles(self) -> int:
		"""Number of element handles handed out since the last dispose()."""
		return len(self._handles)

	def wrap(self, handle: ElementHandle) -> PlaywrightElement:
		self._handles.append(handle)
		return PlaywrightElement(handle, self)

	def wrap_or_dispose(self, js_handle: JSHandle) -> PlaywrightElement | None:
		"""Wrap a handle that may hold null or a non-element value, releasing it in that case."""
		element = js_handle.as_element()
		if element is None:
			js_handle.dispose()
			return None
		return self.wrap(element)

	def dispose(self) -> None:
		handles, self._handles = self._handles, []
		for handle in handles:
			try:
				handle.dispose()
			except PlaywrightError as e:
				logger.debug(f'Could not dispose an element handle: {e.message}')
		logger.debug(f'Disposed {len(handles)} element handles')

	@property
	@translate_playwright_errors
	def body(self) -> PlaywrightElement:
		handle = self.page.query_selector('body')
		if handle is None:
			raise ElementAccessError('Document has no body', {'url': self.page.url})
		return self.wrap(handle)

	@translate_playwright_errors
	def get_element_by_id(self, element_id: str) -> PlaywrightElement | None:
		if not element_id:
			return None
		return self.wrap_or_dispose(self.page.evaluate_handle('id => document.getElementById(id)', element_id))

	@translate_playwright_errors
	def query_selector_all(self, selector: str) -> list[RenderedElement]:
		return [self.wrap(handle) for handle in self.page.query_selector_all(selector)]

	@translate_playwright_errors
	def viewport_size(self) -> tuple[float, float]:
		width, height = self.page.evaluate('() => [window.innerWidth, window.innerHeight]')
		return width, height
