# @file purpose: Resolves labels, captions and table headers around captured elements
"""
Context resolution.

Every captured element gets descriptive text from three independent sources,
collected in this order and joined with ';':

1. linked: labels bound through `for`, `aria-labelledby` and `aria-describedby`
2. ancestor: the nearest enclosing label/fieldset (or field-like container)
3. tabular: the row and cell around a link inside a table
"""

import logging

from action_dom.dom.document import RenderedDocument, RenderedElement
from action_dom.dom.utils import check_string_include_require, get_element_content, get_element_context
from action_dom.dom.views import MAX_TEXT_LENGTH, ElementNode
from action_dom.exceptions import ElementAccessError

logger = logging.getLogger(__name__)

# How far up the ancestor chain a contextual container is looked for
MAX_ANCESTOR_DEPTH = 10

CONTEXTUAL_PARENT_TAGS = frozenset({'label', 'fieldset'})
CONTEXTUAL_PARENT_CLASSES = ('field', 'entry')
TAGS_WITH_DIRECT_PARENT_CONTEXT = frozenset({'a'})
PARENT_TAGS_THAT_DELEGATE_PARENT_CONTEXT = frozenset({'td', 'th', 'tr'})


def check_parent_class(class_name: str) -> bool:
	return any(target in class_name for target in CONTEXTUAL_PARENT_CLASSES)


class ContextResolver:
	"""Attaches context to the elements of one extraction pass."""

	def __init__(self, document: RenderedDocument, marker_attribute: str, deep_context: bool = False):
		self.document = document
		self.marker_attribute = marker_attribute
		self.deep_context = deep_context

	def resolve_all(self, elements: list[ElementNode], live_elements: list[RenderedElement]) -> None:
		for node, element in zip(elements, live_elements, strict=True):
			try:
				self.resolve(node, element)
			except ElementAccessError as e:
				logger.debug(f'No context for element {node.id}: {e}')

	def resolve(self, node: ElementNode, element: RenderedElement) -> str:
		contexts: list[str] = []
		self._context_by_linked(element, contexts)
		self._context_by_parent(element, contexts)
		self._context_by_table(node, element, contexts)
		context = ';'.join(contexts)

		if context and len(context) <= MAX_TEXT_LENGTH:
			node.context = context
		elif context:
			logger.debug(f'Dropping context of element {node.id}: {len(context)} characters is over the limit')

		if self.deep_context and check_string_include_require(context) and not node.is_required:
			node.attributes['required'] = True

		return context

	def _context_by_linked(self, element: RenderedElement, contexts: list[str]) -> None:
		linked_elements: list[RenderedElement] = []
		element_id = element.get_attribute('id')
		if element_id:
			linked_elements.extend(
				label for label in self.document.query_selector_all('label[for]') if label.get_attribute('for') == element_id
			)
		for relation in ('aria-labelledby', 'aria-describedby'):
			reference = element.get_attribute(relation)
			if reference:
				linked = self.document.get_element_by_id(reference)
				if linked is not None:
					linked_elements.append(linked)

		contents = [get_element_content(linked, element) for linked in linked_elements]
		context = ';'.join(content for content in contents if content)
		if context:
			contexts.append(context)

	def _context_by_parent(self, element: RenderedElement, contexts: list[str]) -> None:
		contextual_parent = None
		parent = element.parent
		for _ in range(MAX_ANCESTOR_DEPTH):
			if parent is None:
				break
			if parent.tag_name in CONTEXTUAL_PARENT_TAGS or (
				self.deep_context and check_parent_class(parent.class_name.lower())
			):
				contextual_parent = parent
				break
			parent = parent.parent

		if contextual_parent is None:
			return

		if contextual_parent.tag_name == 'fieldset':
			contextual_parent = contextual_parent.parent
			if contextual_parent is None:
				return

		context = get_element_context(contextual_parent, self.marker_attribute)
		if context:
			contexts.append(context)

	def _context_by_table(self, node: ElementNode, element: RenderedElement, contexts: list[str]) -> None:
		if node.tag_name not in TAGS_WITH_DIRECT_PARENT_CONTEXT:
			return
		parent = element.parent
		if parent is None or parent.tag_name not in PARENT_TAGS_THAT_DELEGATE_PARENT_CONTEXT:
			return

		grandparent = parent.parent
		if grandparent is not None:
			context = get_element_context(grandparent, self.marker_attribute)
			if context:
				contexts.append(context)

		context = get_element_context(parent, self.marker_attribute)
		if context:
			contexts.append(context)
