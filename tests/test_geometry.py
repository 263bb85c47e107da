"""Tests for rect arithmetic and visible rect capture."""

import itertools

import pytest

from action_dom.dom.geometry import Rect, crop_rect_to_visible, get_visible_client_rect, intersects
from tests.dom_fixtures import FakeElement

VIEWPORT = (1280, 800)

RECTS = [
	Rect.create(0, 0, 10, 10),
	Rect.create(5, 5, 15, 15),
	Rect.create(10, 0, 20, 10),
	Rect.create(100, 100, 110, 110),
	Rect.create(-5, -5, 2, 2),
	Rect.create(2, 2, 8, 8),
]


class TestRect:
	def test_width_and_height_are_derived(self):
		rect = Rect.create(10, 20, 50, 80)
		assert rect.width == 40
		assert rect.height == 60
		assert rect.to_dict() == {'top': 20, 'left': 10, 'right': 50, 'bottom': 80, 'width': 40, 'height': 60}

	@pytest.mark.parametrize('a,b', list(itertools.product(RECTS, repeat=2)))
	def test_intersects_is_symmetric(self, a, b):
		assert intersects(a, b) == intersects(b, a)

	def test_touching_edges_do_not_intersect(self):
		assert not Rect.create(0, 0, 10, 10).intersects(Rect.create(10, 0, 20, 10))
		assert not Rect.create(0, 0, 10, 10).intersects(Rect.create(0, 10, 10, 20))

	def test_contained_rect_intersects(self):
		assert Rect.create(0, 0, 10, 10).intersects(Rect.create(2, 2, 8, 8))

	def test_translate_shifts_all_edges(self):
		rect = Rect.create(0, 0, 10, 10).translate(5, 7)
		assert rect == Rect.create(5, 7, 15, 17)
		assert rect.width == 10 and rect.height == 10

	def test_translate_defaults_to_no_shift(self):
		rect = Rect.create(1, 2, 3, 4)
		assert rect.translate().equals(rect)

	def test_copy_accepts_dicts_and_rects(self):
		source = {'top': 1, 'left': 2, 'right': 3, 'bottom': 4, 'width': 1, 'height': 3}
		assert Rect.copy(source) == Rect(top=1, left=2, right=3, bottom=4)
		assert Rect.copy(Rect.copy(source)) == Rect(top=1, left=2, right=3, bottom=4)


class TestCropRectToVisible:
	def test_negative_edges_are_clamped(self):
		assert crop_rect_to_visible(Rect.create(-20, -10, 50, 40), VIEWPORT) == Rect.create(0, 0, 50, 40)

	def test_rect_starting_near_the_bottom_edge_is_offscreen(self):
		assert crop_rect_to_visible(Rect.create(0, 796, 50, 820), VIEWPORT) is None
		assert crop_rect_to_visible(Rect.create(0, 795, 50, 820), VIEWPORT) is not None

	def test_rect_starting_near_the_right_edge_is_offscreen(self):
		assert crop_rect_to_visible(Rect.create(1276, 0, 1300, 20), VIEWPORT) is None


class TestGetVisibleClientRect:
	def test_returns_the_cropped_rect(self):
		element = FakeElement('button', rect=Rect.create(-4, 10, 40, 30))
		assert get_visible_client_rect(element, True, VIEWPORT) == Rect.create(0, 10, 40, 30)

	def test_rects_smaller_than_three_pixels_are_ignored(self):
		element = FakeElement('button', rect=Rect.create(10, 10, 12, 30))
		assert get_visible_client_rect(element, True, VIEWPORT) is None

	def test_first_qualifying_rect_wins(self):
		element = FakeElement('a', rects=[Rect.create(10, 10, 11, 30), Rect.create(10, 40, 60, 60), Rect.create(0, 0, 5, 5)])
		assert get_visible_client_rect(element, True, VIEWPORT) == Rect.create(10, 40, 60, 60)

	def test_invisible_elements_have_no_rect(self):
		element = FakeElement('button', style={'visibility': 'hidden'})
		assert get_visible_client_rect(element, True, VIEWPORT) is None

	def test_offscreen_elements_have_no_rect(self):
		element = FakeElement('button', rect=Rect.create(10, 900, 60, 920))
		assert get_visible_client_rect(element, True, VIEWPORT) is None

	def test_zero_sized_wrapper_uses_its_positioned_child(self):
		child = FakeElement('span', style={'position': 'absolute'}, rect=Rect.create(20, 20, 60, 40))
		static_child = FakeElement('span', rect=Rect.create(0, 0, 200, 200))
		wrapper = FakeElement('a', children=[static_child, child], rect=Rect.create(20, 20, 20, 40))
		assert get_visible_client_rect(wrapper, True, VIEWPORT) == Rect.create(20, 20, 60, 40)

	def test_zero_sized_wrapper_without_child_testing(self):
		child = FakeElement('span', style={'float': 'left'}, rect=Rect.create(20, 20, 60, 40))
		wrapper = FakeElement('a', children=[child], rect=Rect.create(20, 20, 20, 40))
		assert get_visible_client_rect(wrapper, False, VIEWPORT) is None

	def test_inline_zero_font_size_wrapper_uses_inline_children(self):
		child = FakeElement('span', style={'display': 'inline'}, rect=Rect.create(20, 20, 60, 40))
		wrapper = FakeElement(
			'a', children=[child], style={'display': 'inline', 'font-size': '0px'}, rect=Rect.create(20, 20, 60, 20)
		)
		assert get_visible_client_rect(wrapper, True, VIEWPORT) == Rect.create(20, 20, 60, 40)

	def test_zero_font_size_check_is_injectable(self):
		calls = []

		def zero_font(element):
			calls.append(element)
			return True

		child = FakeElement('span', style={'display': 'inline'}, rect=Rect.create(20, 20, 60, 40))
		wrapper = FakeElement('a', children=[child], rect=Rect.create(20, 20, 60, 20))
		assert get_visible_client_rect(wrapper, True, VIEWPORT, zero_font) == Rect.create(20, 20, 60, 40)
		assert calls == [wrapper]
