# @file purpose: Clusters captured elements by screen geometry and labels each cluster for an overlay
"""
Visual clustering and hint strings.

Elements are grouped greedily in registry order: an element joins the first
group holding a member whose rect intersects its own, otherwise it starts a new
group. Groups are never merged afterwards, so the result depends on order.

Each group then receives a short label built from HINT_CHARACTERS. Labels are
as short as possible for the number of groups and are handed out sorted.
"""

import logging

from action_dom.dom.geometry import Rect
from action_dom.dom.views import ElementNode, Group, HintMarker

logger = logging.getLogger(__name__)

HINT_CHARACTERS = 'sadfjklewcmpgh'

# Overlay z-indices start just below the largest value browsers honour
BASE_Z_INDEX = 2147483000


def create_rectangle_for_group(group: Group) -> Rect:
	rects = [element.rect for element in group.elements if element.rect is not None]
	return Rect.create(
		min(rect.left for rect in rects),
		min(rect.top for rect in rects),
		max(rect.right for rect in rects),
		max(rect.bottom for rect in rects),
	)


def group_elements_visually(elements: list[ElementNode]) -> list[Group]:
	groups: list[Group] = []
	for element in elements:
		if element.rect is None:
			continue
		group = next(
			(
				group
				for group in groups
				if any(member.rect is not None and member.rect.intersects(element.rect) for member in group.elements)
			),
			None,
		)
		if group is not None:
			group.elements.append(element)
		else:
			groups.append(Group(elements=[element]))

	for group in groups:
		group.rect = create_rectangle_for_group(group)

	return groups


def generate_hint_strings(count: int) -> list[str]:
	"""The `count` shortest strings over HINT_CHARACTERS, sorted."""
	hint_strings = ['']
	offset = 0
	while len(hint_strings) - offset < count or len(hint_strings) == 1:
		hint_string = hint_strings[offset]
		offset += 1
		for character in HINT_CHARACTERS:
			hint_strings.append(character + hint_string)
	return sorted(hint_strings[offset : offset + count])


class OverlayContext:
	"""Per-pass state of the overlay: hands out increasing z-indices to markers."""

	def __init__(self, base_z_index: int = BASE_Z_INDEX):
		self.current_z_index = base_z_index

	def next_z_index(self) -> int:
		z_index = self.current_z_index
		self.current_z_index += 1
		return z_index

	def create_hint_markers(self, groups: list[Group]) -> list[HintMarker]:
		if not groups:
			logger.debug('No groups found, no hint markers created')
			return []

		hint_markers = [HintMarker(group=group, z_index=self.next_z_index()) for group in groups]
		for hint_marker, hint_string in zip(hint_markers, generate_hint_strings(len(hint_markers)), strict=True):
			hint_marker.label = hint_string
		return hint_markers


def build_hint_markers(elements: list[ElementNode]) -> list[HintMarker]:
	"""Group the elements and label every group, with a fresh overlay context."""
	return OverlayContext().create_hint_markers(group_elements_visually(elements))
