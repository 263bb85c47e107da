# @file purpose: Rectangle value type and visible-rect capture for rendered elements

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
	from action_dom.dom.document import RenderedElement

# Rects narrower or shorter than this are treated as invisible
MIN_RECT_SIZE = 3
# A rect starting this close to the right/bottom viewport edge is treated as offscreen
VIEWPORT_EDGE_MARGIN = 4


@dataclass(frozen=True, slots=True)
class Rect:
	"""Immutable rectangle in CSS pixels, viewport coordinates."""

	top: float
	left: float
	right: float
	bottom: float

	@property
	def width(self) -> float:
		return self.right - self.left

	@property
	def height(self) -> float:
		return self.bottom - self.top

	@classmethod
	def create(cls, x1: float, y1: float, x2: float, y2: float) -> 'Rect':
		"""Create a rect from the top left (x1, y1) and bottom right (x2, y2) corners."""
		return cls(top=y1, left=x1, right=x2, bottom=y2)

	@classmethod
	def copy(cls, rect: Any) -> 'Rect':
		"""Copy any object exposing top/left/right/bottom (a DOMRect dict, another Rect...)."""
		if isinstance(rect, dict):
			return cls(top=rect['top'], left=rect['left'], right=rect['right'], bottom=rect['bottom'])
		return cls(top=rect.top, left=rect.left, right=rect.right, bottom=rect.bottom)

	def translate(self, x: float | None = None, y: float | None = None) -> 'Rect':
		"""Translate the rect by x horizontally and y vertically."""
		x = x or 0
		y = y or 0
		return Rect(top=self.top + y, left=self.left + x, right=self.right + x, bottom=self.bottom + y)

	def intersects(self, other: 'Rect') -> bool:
		"""Whether the two rects overlap. Touching edges do not count."""
		return self.right > other.left and self.left < other.right and self.bottom > other.top and self.top < other.bottom

	def equals(self, other: 'Rect') -> bool:
		return self == other

	def to_dict(self) -> dict[str, float]:
		return {
			'top': self.top,
			'left': self.left,
			'right': self.right,
			'bottom': self.bottom,
			'width': self.width,
			'height': self.height,
		}


def intersects(rect1: Rect, rect2: Rect) -> bool:
	return rect1.intersects(rect2)


def crop_rect_to_visible(rect: Rect, viewport: tuple[float, float]) -> Rect | None:
	"""Bound the rect by the viewport. Returns None when the rect starts offscreen."""
	viewport_width, viewport_height = viewport
	bounded = Rect.create(max(rect.left, 0), max(rect.top, 0), rect.right, rect.bottom)
	if bounded.top >= viewport_height - VIEWPORT_EDGE_MARGIN or bounded.left >= viewport_width - VIEWPORT_EDGE_MARGIN:
		return None
	return bounded


def is_inline_zero_font_size(element: 'RenderedElement') -> bool:
	"""Inline elements with font-size 0px declare a zero height even if a child with a real font size holds text."""
	style = element.computed_style()
	if style is None:
		return False
	return style.get('display', '').startswith('inline') and style.get('font-size') == '0px'


def _is_big_enough(rect: Rect | None) -> bool:
	return rect is not None and rect.width >= MIN_RECT_SIZE and rect.height >= MIN_RECT_SIZE


def get_visible_client_rect(
	element: 'RenderedElement',
	test_children: bool,
	viewport: tuple[float, float],
	inline_zero_font_size: Callable[['RenderedElement'], bool] = is_inline_zero_font_size,
) -> Rect | None:
	"""
	Return the first client rect of the element that is visible in the viewport.

	A zero-sized rect may be wrapping visible floated or absolutely positioned
	children; with test_children set, those children are inspected instead.
	"""
	for client_rect in element.client_rects():
		if (client_rect.width == 0 or client_rect.height == 0) and test_children:
			for child in element.children():
				child_style = child.computed_style() or {}
				# Ignore children that are not floated and not absolutely positioned, unless the
				# parent is an inline zero-font-size wrapper around inline content
				if (
					child_style.get('float', 'none') == 'none'
					and child_style.get('position', 'static') not in ('absolute', 'fixed')
					and not (
						client_rect.height == 0
						and inline_zero_font_size(element)
						and child_style.get('display', '').startswith('inline')
					)
				):
					continue
				child_rect = get_visible_client_rect(child, True, viewport, inline_zero_font_size)
				if not _is_big_enough(child_rect):
					continue
				return child_rect
		else:
			cropped = crop_rect_to_visible(client_rect, viewport)
			if not _is_big_enough(cropped):
				continue

			# eliminate invisible elements
			style = element.computed_style() or {}
			if style.get('visibility', 'visible') != 'visible':
				continue

			return cropped

	return None
