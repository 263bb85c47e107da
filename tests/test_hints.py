"""Tests for visual clustering and hint string generation."""

import pytest

from action_dom.dom.geometry import Rect
from action_dom.dom.hints import (
	BASE_Z_INDEX,
	HINT_CHARACTERS,
	OverlayContext,
	build_hint_markers,
	generate_hint_strings,
	group_elements_visually,
)
from action_dom.dom.views import Group
from tests.conftest import create_node


def minimal_length(count: int) -> int:
	length = 1
	while len(HINT_CHARACTERS) ** length < count:
		length += 1
	return length


class TestGenerateHintStrings:
	@pytest.mark.parametrize('count', [1, 2, 13, 14, 15, 100, 196, 197])
	def test_minimal_distinct_sorted(self, count):
		hints = generate_hint_strings(count)
		assert len(hints) == count
		assert len(set(hints)) == count
		assert hints == sorted(hints)
		assert all(set(hint) <= set(HINT_CHARACTERS) for hint in hints)
		assert max(len(hint) for hint in hints) == minimal_length(count)

	def test_small_counts_use_single_characters(self):
		assert generate_hint_strings(3) == ['a', 'd', 's']

	def test_zero_count(self):
		assert generate_hint_strings(0) == []

	def test_no_hint_is_a_suffix_of_another(self):
		hints = generate_hint_strings(40)
		assert not any(a != b and b.endswith(a) for a in hints for b in hints)


class TestGroupElementsVisually:
	def test_overlapping_rects_share_a_group(self):
		elements = [
			create_node(0, rect=Rect.create(0, 0, 10, 10)),
			create_node(1, rect=Rect.create(5, 5, 15, 15)),
			create_node(2, rect=Rect.create(100, 100, 110, 110)),
		]
		groups = group_elements_visually(elements)
		assert [[element.id for element in group.elements] for group in groups] == [[0, 1], [2]]
		assert groups[0].rect == Rect.create(0, 0, 15, 15)
		assert groups[1].rect == Rect.create(100, 100, 110, 110)

	def test_elements_without_rect_are_skipped(self):
		groups = group_elements_visually([create_node(0), create_node(1, rect=Rect.create(0, 0, 10, 10))])
		assert [[element.id for element in group.elements] for group in groups] == [[1]]

	def test_grouping_is_greedy_and_order_dependent(self):
		left = create_node(0, rect=Rect.create(0, 0, 10, 10))
		right = create_node(1, rect=Rect.create(20, 0, 30, 10))
		bridge = create_node(2, rect=Rect.create(5, 0, 25, 10))

		groups = group_elements_visually([left, right, bridge])
		assert [[element.id for element in group.elements] for group in groups] == [[0, 2], [1]]

		groups = group_elements_visually([left, bridge, right])
		assert [[element.id for element in group.elements] for group in groups] == [[0, 2, 1]]


class TestHintMarkers:
	def test_one_marker_per_group_with_increasing_z_index(self):
		groups = [
			Group(elements=[create_node(0)], rect=Rect.create(0, 0, 10, 10)),
			Group(elements=[create_node(1)], rect=Rect.create(20, 0, 30, 10)),
		]
		markers = OverlayContext().create_hint_markers(groups)
		assert [marker.label for marker in markers] == ['a', 's']
		assert [marker.z_index for marker in markers] == [BASE_Z_INDEX, BASE_Z_INDEX + 1]
		assert markers[1].rect == Rect.create(20, 0, 30, 10)

	def test_no_groups_no_markers(self, caplog):
		with caplog.at_level('DEBUG', logger='action_dom'):
			assert OverlayContext().create_hint_markers([]) == []
		assert any('no hint markers' in record.getMessage() for record in caplog.records)

	def test_each_pass_starts_a_fresh_overlay(self):
		elements = [create_node(0, rect=Rect.create(0, 0, 10, 10))]
		assert build_hint_markers(elements)[0].z_index == build_hint_markers(elements)[0].z_index == BASE_Z_INDEX

	def test_page_rect_and_export(self):
		elements = [create_node(3, rect=Rect.create(0, 0, 10, 10)), create_node(4, rect=Rect.create(2, 2, 12, 12))]
		[marker] = build_hint_markers(elements)
		assert marker.page_rect(0, 500) == Rect.create(0, 500, 12, 512)
		assert marker.to_dict() == {
			'rect': Rect.create(0, 0, 12, 12).to_dict(),
			'label': 's',
			'z_index': BASE_Z_INDEX,
			'element_ids': [3, 4],
		}
