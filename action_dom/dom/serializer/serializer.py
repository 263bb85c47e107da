# @file purpose: Prunes, deduplicates and cross-links the element tree of one extraction pass

import re
import time

from action_dom.dom.views import EXPORT_ATTRIBUTES, ElementNode
from action_dom.utils import time_execution_sync

_REPEATED_SEPARATORS_RE = re.compile(r';+')
_EDGE_SEPARATORS_RE = re.compile(r'^;+|;+$')


def remove_orphan_nodes(elements: list[ElementNode]) -> list[ElementNode]:
	"""Drop label nodes left without children once their own subtree is pruned."""
	trimmed = []
	for element in elements:
		element.children = remove_orphan_nodes(element.children)
		if element.tag_name == 'label' and not element.children:
			continue
		trimmed.append(element)
	return trimmed


def _remove_duplicated_text(element: ElementNode) -> str:
	text = element.text
	for option in element.options or []:
		text = text.replace(option.text, '', 1)
	for child in element.children:
		text = text.replace(child.text, '', 1)
	text = _REPEATED_SEPARATORS_RE.sub(';', text)
	return _EDGE_SEPARATORS_RE.sub('', text)


def trim_duplicated_text(element: ElementNode) -> None:
	"""Remove the text of options and children from the element's own text, children first."""
	if not element.children and not element.options:
		return

	for child in element.children:
		trim_duplicated_text(child)

	# Every change shortens the text, so this terminates
	text = _remove_duplicated_text(element)
	while text != element.text:
		element.text = text
		text = _remove_duplicated_text(element)


def trim_duplicated_context(element: ElementNode) -> None:
	"""Drop the parts of a child's context its parent already shows."""
	for child in element.children:
		trim_duplicated_context(child)
		if element.context == child.context:
			child.context = None
		if child.context:
			child.context = child.context.replace(element.text, '', 1)
			if not child.context:
				child.context = None


def trimmed_attributes(tag_name: str, attributes: dict[str, str | bool]) -> dict[str, str | bool]:
	"""The attributes worth exporting: the allow-list, plus ids of form controls and list roles."""
	kept = {}
	for key, value in attributes.items():
		if (
			(key == 'id' and tag_name in ('input', 'textarea', 'select'))
			or (key == 'role' and value in ('listbox', 'option'))
			or (key in EXPORT_ATTRIBUTES and value)
		):
			kept[key] = value
	return kept


def build_element_links(elements: list[ElementNode]) -> None:
	"""Point every element whose text or context mentions a listbox's text at that listbox."""
	for listbox in elements:
		if listbox.role != 'listbox':
			continue
		listbox_text = listbox.text or ''
		# '' is a substring of everything
		if not listbox_text:
			continue
		for element in elements:
			if element.id == listbox.id:
				continue
			if (element.text and listbox_text in element.text) or (element.context and listbox_text in element.context):
				element.linked_element = listbox.id


class ElementTreeSerializer:
	"""Post-processes the registry and forest produced by the tree builder."""

	def __init__(self, elements: list[ElementNode], element_tree: list[ElementNode]):
		self.elements = elements
		self.element_tree = element_tree
		self.timing_info: dict[str, float] = {}

	@time_execution_sync('--serialize_element_tree')
	def serialize(self) -> tuple[list[ElementNode], dict[str, float]]:
		start_total = time.time()

		# Step 1: drop labels that no longer wrap anything
		start = time.time()
		self.element_tree = remove_orphan_nodes(self.element_tree)
		self.timing_info['remove_orphan_nodes'] = time.time() - start

		# Step 2: text and context deduplication
		start = time.time()
		for root in self.element_tree:
			trim_duplicated_text(root)
			trim_duplicated_context(root)
		self.timing_info['trim_duplicates'] = time.time() - start

		# Step 3: link controls to the listboxes they drive
		start = time.time()
		build_element_links(self.elements)
		self.timing_info['build_element_links'] = time.time() - start

		self.timing_info['serialize_element_tree_total'] = time.time() - start_total
		return self.element_tree, self.timing_info
