import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from action_dom.config import CONFIG
from action_dom.dom.context import ContextResolver
from action_dom.dom.document import RenderedDocument, RenderedElement
from action_dom.dom.geometry import get_visible_client_rect, is_inline_zero_font_size
from action_dom.dom.hints import build_hint_markers
from action_dom.dom.serializer.clickable_elements import ClickableElementDetector
from action_dom.dom.serializer.serializer import ElementTreeSerializer
from action_dom.dom.utils import (
	build_xpath,
	cap_text_length,
	check_required_from_style,
	get_element_content,
	remove_multiple_spaces,
)
from action_dom.dom.views import (
	BOOLEAN_ATTRIBUTES,
	ElementCategory,
	ElementNode,
	PageStructure,
	SelectOption,
)
from action_dom.exceptions import ElementAccessError, MalformedTreeError
from action_dom.utils import time_execution_sync

logger = logging.getLogger(__name__)

SELECT2_CONTAINER_SELECTOR = '.select2-container'


def coerce_attribute(name: str, value: str) -> str | bool:
	if name in BOOLEAN_ATTRIBUTES:
		return not (value and value.lower() == 'false')
	return value


def is_combobox_dropdown(element: RenderedElement) -> bool:
	"""A read-only input that opens the listbox it controls when clicked."""
	if element.tag_name != 'input':
		return False
	role = (element.get_attribute('role') or '').lower()
	has_popup = (element.get_attribute('aria-haspopup') or '').lower()
	readonly = element.get_attribute('readonly')
	is_readonly = bool(readonly) and readonly.lower() != 'false'
	return bool(role and has_popup and element.has_attribute('aria-controls') and is_readonly)


def categorize(element: RenderedElement, attributes: dict[str, str | bool]) -> ElementCategory:
	if element.tag_name == 'select':
		return ElementCategory.SELECTABLE
	role = attributes.get('role')
	if isinstance(role, str) and role.lower() == 'listbox':
		return ElementCategory.LISTBOX
	if is_combobox_dropdown(element):
		return ElementCategory.COMBOBOX_TRIGGER
	return ElementCategory.GENERIC


def get_select_options(element: RenderedElement) -> list[SelectOption]:
	return [
		SelectOption(option_index=index, text=remove_multiple_spaces(text)) for index, text in element.select_options()
	]


def get_listbox_options(element: RenderedElement) -> list[SelectOption]:
	return [
		SelectOption(option_index=index, text=remove_multiple_spaces(option.text_content))
		for index, option in enumerate(element.query_selector_all('[role="option"]'))
	]


class TraversalContext:
	"""
	State of one extraction pass.

	Holds the id-indexed arena of captured elements next to their live
	counterparts, and every mutation the pass applied to the document so it can
	be undone when the pass ends.
	"""

	def __init__(self, document: RenderedDocument, deep_context: bool, marker_attribute: str):
		self.document = document
		self.deep_context = deep_context
		self.marker_attribute = marker_attribute
		self.elements: list[ElementNode] = []
		self.roots: list[ElementNode] = []
		self.live_elements: list[RenderedElement] = []
		self.id_to_xpath: dict[int, str] = {}
		self._viewport: tuple[float, float] | None = None
		self._inline_zero_font_size_cache: dict[RenderedElement, bool] = {}
		self._undo_actions: list[Callable[[], None]] = []

	@property
	def viewport(self) -> tuple[float, float]:
		if self._viewport is None:
			self._viewport = self.document.viewport_size()
		return self._viewport

	def next_id(self) -> int:
		return len(self.elements)

	def register(self, node: ElementNode, element: RenderedElement) -> None:
		assert node.id == len(self.elements), f'element ids must be dense, got {node.id} for slot {len(self.elements)}'
		self.elements.append(node)
		self.live_elements.append(element)

	def live_element(self, element_id: int) -> RenderedElement:
		return self.live_elements[element_id]

	def is_inline_zero_font_size(self, element: RenderedElement) -> bool:
		if element not in self._inline_zero_font_size_cache:
			self._inline_zero_font_size_cache[element] = is_inline_zero_font_size(element)
		return self._inline_zero_font_size_cache[element]

	def mark(self, element: RenderedElement, element_id: int) -> None:
		element.set_attribute(self.marker_attribute, str(element_id))

	def clear_markers(self) -> None:
		for element in self.document.query_selector_all(f'[{self.marker_attribute}]'):
			element.remove_attribute(self.marker_attribute)

	def record_undo(self, action: Callable[[], None]) -> None:
		self._undo_actions.append(action)

	def undo_mutations(self) -> None:
		while self._undo_actions:
			action = self._undo_actions.pop()
			try:
				action()
			except ElementAccessError as e:
				logger.debug(f'Could not restore a temporary page change: {e}')

	@contextmanager
	def scoped_mutations(self) -> Iterator['TraversalContext']:
		"""Start from a document without markers and leave it that way, whatever happens in between."""
		try:
			self.clear_markers()
			yield self
		finally:
			try:
				try:
					self.clear_markers()
				finally:
					self.undo_mutations()
			finally:
				# Live elements handed out during the pass are not valid past this point
				self.document.dispose()


class DomService:
	"""
	Extracts the action-oriented element tree of a rendered document.

	Each call to extract() is one independent pass: the document is walked from
	its body, interactable elements are captured, context is resolved, the tree
	is pruned and cross-linked, and elements are clustered for hint markers.
	"""

	def __init__(
		self,
		document: RenderedDocument,
		deep_context: bool | None = None,
		marker_attribute: str | None = None,
		logger: logging.Logger | None = None,
	):
		self.document = document
		self.deep_context = CONFIG.ACTION_DOM_DEEP_CONTEXT if deep_context is None else deep_context
		self.marker_attribute = marker_attribute or CONFIG.ACTION_DOM_MARKER_ATTRIBUTE
		self.logger = logger or logging.getLogger(__name__)

	@time_execution_sync('--extract')
	def extract(self) -> PageStructure:
		"""Run one full pass. Either returns a consistent PageStructure or raises."""
		timing_info: dict[str, float] = {}
		start_total = time.time()

		ctx = TraversalContext(self.document, self.deep_context, self.marker_attribute)
		with ctx.scoped_mutations():
			start = time.time()
			self._normalize_select2(ctx)
			self._build_tree(ctx)
			timing_info['build_tree'] = time.time() - start

			start = time.time()
			self._log_required_without_value(ctx.elements)
			ContextResolver(self.document, self.marker_attribute, self.deep_context).resolve_all(
				ctx.elements, ctx.live_elements
			)
			timing_info['resolve_context'] = time.time() - start

		serializer = ElementTreeSerializer(ctx.elements, ctx.roots)
		element_tree, serializer_timing = serializer.serialize()
		timing_info.update(serializer_timing)
		validate_structure(ctx.elements, element_tree)

		start = time.time()
		hint_markers = build_hint_markers(ctx.elements)
		timing_info['build_hint_markers'] = time.time() - start
		timing_info['extract_total'] = time.time() - start_total

		self.logger.debug(
			f'📄 Extracted {len(ctx.elements)} interactable elements, {len(element_tree)} roots, {len(hint_markers)} hint markers'
		)
		return PageStructure(
			elements=ctx.elements,
			element_tree=element_tree,
			hint_markers=hint_markers,
			id_to_xpath=ctx.id_to_xpath,
			timing_info=timing_info,
		)

	@time_execution_sync('--build_tree')
	def build_tree(self) -> tuple[list[ElementNode], list[ElementNode]]:
		"""Registry and raw forest of the document, before context resolution and pruning."""
		ctx = TraversalContext(self.document, self.deep_context, self.marker_attribute)
		with ctx.scoped_mutations():
			self._normalize_select2(ctx)
			self._build_tree(ctx)
		return ctx.elements, ctx.roots

	# --- select2 -------------------------------------------------------------------

	def _normalize_select2(self, ctx: TraversalContext) -> None:
		"""Show the native select hidden behind each select2 widget and hide the widget instead."""
		try:
			containers = self.document.query_selector_all(SELECT2_CONTAINER_SELECTOR)
		except ElementAccessError as e:
			self.logger.debug(f'Skipping select2 normalization: {e}')
			return

		for container in containers:
			try:
				siblings = container.previous_element_siblings() + container.next_element_siblings()
				for sibling in siblings:
					if sibling.tag_name == 'select' and self._show_invisible(ctx, sibling):
						self._hide(ctx, container)
						break
			except ElementAccessError as e:
				self.logger.debug(f'Skipping a select2 container: {e}')

	def _show_invisible(self, ctx: TraversalContext, element: RenderedElement) -> bool:
		if element.inline_style('display') == 'none':
			element.remove_inline_style('display')
			ctx.record_undo(lambda: element.set_inline_style('display', 'none'))
			return True

		original_class = element.get_attribute('class')
		hidden_classes = [name for name in element.class_list if 'hidden' in name]
		if not hidden_classes:
			return False
		element.set_attribute('class', ' '.join(name for name in element.class_list if name not in hidden_classes))
		ctx.record_undo(lambda: element.set_attribute('class', original_class or ''))
		return True

	def _hide(self, ctx: TraversalContext, element: RenderedElement) -> None:
		previous_display = element.inline_style('display')
		element.set_inline_style('display', 'none')
		if previous_display:
			ctx.record_undo(lambda: element.set_inline_style('display', previous_display))
		else:
			ctx.record_undo(lambda: element.remove_inline_style('display'))

	# --- traversal -----------------------------------------------------------------

	def _build_tree(self, ctx: TraversalContext) -> None:
		self._process_element(ctx, self.document.body, None)

	def _process_element(self, ctx: TraversalContext, element: RenderedElement, parent: ElementNode | None) -> None:
		target = parent
		if ClickableElementDetector.is_interactive(element):
			try:
				node = self._build_element_node(ctx, element)
			except ElementAccessError as e:
				self.logger.debug(f'Treating an element that could not be captured as non-interactable: {e}')
				node = None
			if node is not None:
				if parent is None:
					ctx.roots.append(node)
				else:
					parent.children.append(node)
				if ctx.deep_context and node.options:
					return
				target = node

		try:
			children = element.children()
		except ElementAccessError as e:
			self.logger.debug(f'Not descending into an element: {e}')
			return
		for child in children:
			self._process_element(ctx, child, target)

	def _build_element_node(self, ctx: TraversalContext, element: RenderedElement) -> ElementNode:
		tag_name = element.tag_name
		if tag_name == 'a' and element.get_attribute('target') == '_blank':
			element.remove_attribute('target')

		attributes = {name: coerce_attribute(name, value) for name, value in element.attributes().items()}

		if (
			ctx.deep_context
			and not attributes.get('required')
			and not attributes.get('aria-required')
			and check_required_from_style(element)
		):
			attributes['required'] = True

		if tag_name in ('input', 'textarea'):
			attributes['value'] = element.value or ''

		text = get_element_content(element)
		xpath = build_xpath(element)

		# Everything is read before the id is taken, so a failed read leaves no gap and no marker
		element_id = ctx.next_id()
		ctx.mark(element, element_id)
		node = ElementNode(
			id=element_id,
			tag_name=tag_name,
			attributes=attributes,
			text=text,
			rect=self._visible_rect(ctx, element),
		)
		ctx.register(node, element)
		ctx.id_to_xpath[element_id] = xpath

		options = self._capture_options(node, element)
		if options is not None:
			node.options = options
		return node

	def _visible_rect(self, ctx: TraversalContext, element: RenderedElement):
		try:
			return get_visible_client_rect(element, True, ctx.viewport, ctx.is_inline_zero_font_size)
		except ElementAccessError as e:
			self.logger.debug(f'No visible rect for an element: {e}')
			return None

	def _capture_options(self, node: ElementNode, element: RenderedElement) -> list[SelectOption] | None:
		try:
			category = categorize(element, node.attributes)
			if category is ElementCategory.SELECTABLE:
				return get_select_options(element)
			elif category is ElementCategory.LISTBOX:
				return get_listbox_options(element)
		except ElementAccessError as e:
			self.logger.debug(f'Could not read the options of element {node.id}: {e}')
			return None

		if category is ElementCategory.COMBOBOX_TRIGGER:
			return self._capture_combobox_options(node, element)
		elif category is ElementCategory.GENERIC:
			return None
		raise AssertionError(f'Unhandled element category: {category}')

	def _capture_combobox_options(self, node: ElementNode, element: RenderedElement) -> list[SelectOption] | None:
		"""Open the combobox, read the listbox it controls, then close it again with Tab."""
		options = None
		try:
			element.click()
			listbox = self.document.get_element_by_id(element.get_attribute('aria-controls') or '')
			if listbox is not None:
				options = get_listbox_options(listbox)
		except ElementAccessError as e:
			self.logger.debug(f'Could not read the options of combobox {node.id}: {e}')
		finally:
			try:
				element.press_key('Tab')
			except ElementAccessError as e:
				self.logger.debug(f'Could not close combobox {node.id}: {e}')
		return options

	def _log_required_without_value(self, elements: list[ElementNode]) -> None:
		for element in elements:
			is_text_field = (element.tag_name == 'input' and element.attributes.get('type') == 'text') or (
				element.tag_name == 'textarea'
			)
			if is_text_field and element.is_required and element.attributes.get('value') == '':
				self.logger.info(
					f'Required {element.tag_name} {element.id} has no value: {cap_text_length(element.text, 80)!r}'
				)


def validate_structure(elements: list[ElementNode], element_tree: list[ElementNode]) -> None:
	"""Raise MalformedTreeError unless ids are dense and every tree node is the registry entry with its id."""
	if not isinstance(elements, list) or not isinstance(element_tree, list):
		raise MalformedTreeError('Invalid element tree structure', {'elements': type(elements), 'tree': type(element_tree)})

	for index, element in enumerate(elements):
		if not isinstance(element, ElementNode) or element.id != index:
			raise MalformedTreeError('Element ids are not dense', {'index': index, 'element': repr(element)})

	seen: set[int] = set()
	for root in element_tree:
		for node in root.iter_tree():
			if not isinstance(node, ElementNode) or not 0 <= node.id < len(elements) or elements[node.id] is not node:
				raise MalformedTreeError('Tree node missing from the registry', {'node': repr(node)})
			if node.id in seen:
				raise MalformedTreeError('Tree node appears twice', {'id': node.id})
			seen.add(node.id)
