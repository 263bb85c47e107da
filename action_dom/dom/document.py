# @file purpose: Abstract view of a live rendered document used by the extraction engine
"""
Rendered document interface.

The extraction engine never talks to a browser directly. It walks a live page
through these two classes, which a binding implements on top of a real engine
(see action_dom.browser.playwright_document). Every query reflects the state of
the page at call time; nothing here is cached.

Bindings raise action_dom.exceptions.ElementAccessError when an element can no
longer be queried.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Union

from action_dom.dom.geometry import Rect

# A child node is either an element or the data of a text node
ChildNode = Union['RenderedElement', str]


class RenderedElement(ABC):
	"""A live element of a rendered document."""

	@property
	@abstractmethod
	def tag_name(self) -> str:
		"""Lowercase tag name."""

	@property
	@abstractmethod
	def parent(self) -> 'RenderedElement | None':
		"""Parent element, None for the document element or detached nodes."""

	@abstractmethod
	def children(self) -> list['RenderedElement']:
		"""Element children in document order."""

	@abstractmethod
	def child_nodes(self) -> list[ChildNode]:
		"""Element and text children in document order. Comments and other node types are left out."""

	@abstractmethod
	def attributes(self) -> dict[str, str]:
		"""All attributes in declaration order."""

	@abstractmethod
	def get_attribute(self, name: str) -> str | None: ...

	@abstractmethod
	def set_attribute(self, name: str, value: str) -> None: ...

	@abstractmethod
	def remove_attribute(self, name: str) -> None: ...

	@abstractmethod
	def computed_style(self, pseudo: str | None = None) -> Mapping[str, str] | None:
		"""Computed style of the element (or of a pseudo element such as '::after'), None without a view."""

	@abstractmethod
	def client_rects(self) -> list[Rect]: ...

	@abstractmethod
	def bounding_client_rect(self) -> Rect: ...

	@abstractmethod
	def check_visibility(self) -> bool:
		"""The engine's native visibility check, ignoring opacity and the visibility property."""

	@property
	@abstractmethod
	def hidden(self) -> bool: ...

	@property
	@abstractmethod
	def disabled(self) -> bool: ...

	@property
	@abstractmethod
	def is_content_editable(self) -> bool: ...

	@property
	@abstractmethod
	def href(self) -> str:
		"""Resolved link destination of an anchor, '' when there is none."""

	@property
	@abstractmethod
	def value(self) -> str | None:
		"""Current value of a form control, None for elements without one."""

	@property
	@abstractmethod
	def text_content(self) -> str: ...

	@abstractmethod
	def label_control(self) -> 'RenderedElement | None':
		"""The control a label element is bound to."""

	@abstractmethod
	def select_options(self) -> list[tuple[int, str]]:
		"""(index, raw text content) of every option of a select element."""

	@abstractmethod
	def inline_style(self, prop: str) -> str: ...

	@abstractmethod
	def set_inline_style(self, prop: str, value: str) -> None: ...

	@abstractmethod
	def remove_inline_style(self, prop: str) -> None: ...

	@abstractmethod
	def click(self) -> None: ...

	@abstractmethod
	def press_key(self, key: str) -> None:
		"""Dispatch a bubbling keydown event for the key on the element."""

	@abstractmethod
	def query_selector_all(self, selector: str) -> list['RenderedElement']:
		"""Descendants matching a CSS selector, in document order."""

	def has_attribute(self, name: str) -> bool:
		return self.get_attribute(name) is not None

	@property
	def class_name(self) -> str:
		return self.get_attribute('class') or ''

	@property
	def class_list(self) -> list[str]:
		return self.class_name.split()

	def is_same_node(self, other: 'RenderedElement | None') -> bool:
		return self is other

	def previous_element_siblings(self) -> list['RenderedElement']:
		"""Preceding element siblings, nearest first."""
		siblings = self.parent.children() if self.parent else []
		for index, sibling in enumerate(siblings):
			if sibling.is_same_node(self):
				return list(reversed(siblings[:index]))
		return []

	def next_element_siblings(self) -> list['RenderedElement']:
		"""Following element siblings, nearest first."""
		siblings = self.parent.children() if self.parent else []
		for index, sibling in enumerate(siblings):
			if sibling.is_same_node(self):
				return siblings[index + 1 :]
		return []

	def absolute_xpath(self) -> str:
		"""Absolute XPath of the element, e.g. /html/body/div[2]/input."""
		segments = []
		current: RenderedElement | None = self
		while current is not None:
			parent = current.parent
			tag = current.tag_name
			if parent is None:
				segments.append(tag)
				break
			same_tag = [sibling for sibling in parent.children() if sibling.tag_name == tag]
			if len(same_tag) > 1:
				position = next(index for index, sibling in enumerate(same_tag, start=1) if sibling.is_same_node(current))
				segments.append(f'{tag}[{position}]')
			else:
				segments.append(tag)
			current = parent
		return '/' + '/'.join(reversed(segments))


class RenderedDocument(ABC):
	"""A live rendered document."""

	@property
	@abstractmethod
	def body(self) -> RenderedElement: ...

	@abstractmethod
	def get_element_by_id(self, element_id: str) -> RenderedElement | None: ...

	@abstractmethod
	def query_selector_all(self, selector: str) -> list[RenderedElement]: ...

	@abstractmethod
	def viewport_size(self) -> tuple[float, float]:
		"""(innerWidth, innerHeight) of the window."""

	def dispose(self) -> None:
		"""Release whatever the binding holds for the elements it handed out. Called at the end of every pass."""
