import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from action_dom.dom.geometry import Rect

# Attributes whose values are coerced to booleans when captured
BOOLEAN_ATTRIBUTES = frozenset(
	{
		'required',
		'aria-required',
		'checked',
		'aria-checked',
		'selected',
		'aria-selected',
		'readonly',
		'aria-readonly',
	}
)

# Attributes kept when the tree is exported (plus the tag/role conditional rules in the serializer)
EXPORT_ATTRIBUTES = frozenset(
	{
		'accept',
		'alt',
		'aria-checked',
		'aria-current',
		'aria-label',
		'aria-required',
		'aria-role',
		'aria-selected',
		'checked',
		'data-original-title',
		'data-ui',
		'for',
		'href',
		'maxlength',
		'name',
		'pattern',
		'placeholder',
		'readonly',
		'required',
		'selected',
		'src',
		'text-value',
		'title',
		'type',
		'value',
	}
)

# Text and context longer than this are dropped
MAX_TEXT_LENGTH = 5000


class ElementCategory(str, Enum):
	"""How the builder captures selection options for an element."""

	GENERIC = 'generic'
	SELECTABLE = 'selectable'
	LISTBOX = 'listbox'
	COMBOBOX_TRIGGER = 'combobox_trigger'


class ElementTreeFormat(str, Enum):
	JSON = 'json'
	HTML = 'html'


class SelectOption(BaseModel):
	"""One entry of a selection control."""

	model_config = ConfigDict(frozen=True, populate_by_name=True)

	option_index: int = Field(serialization_alias='optionIndex', validation_alias='optionIndex')
	text: str


@dataclass(slots=True, eq=False)
class ElementNode:
	"""An interactable element captured during one extraction pass."""

	id: int
	tag_name: str
	attributes: dict[str, str | bool] = field(default_factory=dict)
	text: str = ''
	children: list['ElementNode'] = field(default_factory=list)
	rect: Rect | None = None
	options: list[SelectOption] | None = None
	context: str | None = None
	linked_element: int | None = None

	@property
	def role(self) -> str:
		role = self.attributes.get('role')
		return role.lower() if isinstance(role, str) else ''

	@property
	def value(self) -> str | bool | None:
		if self.tag_name in ('input', 'textarea'):
			return self.attributes.get('value')
		return None

	@property
	def is_required(self) -> bool:
		return bool(self.attributes.get('required') or self.attributes.get('aria-required'))

	def iter_tree(self):
		"""Yield this node and all its descendants in pre-order."""
		yield self
		for child in self.children:
			yield from child.iter_tree()

	def to_dict(self) -> dict[str, Any]:
		data: dict[str, Any] = {
			'id': self.id,
			'tagName': self.tag_name,
			'attributes': dict(self.attributes),
			'text': self.text,
			'children': [child.to_dict() for child in self.children],
			'rect': self.rect.to_dict() if self.rect else None,
		}
		if self.options is not None:
			data['options'] = [option.model_dump(by_alias=True) for option in self.options]
		if self.context is not None:
			data['context'] = self.context
		if self.linked_element is not None:
			data['linked_element'] = self.linked_element
		return data

	def __repr__(self) -> str:
		return f'<ElementNode id={self.id} {self.tag_name} text={self.text[:30]!r} children={len(self.children)}>'


@dataclass(slots=True)
class Group:
	"""Elements clustered together by overlapping rectangles."""

	elements: list[ElementNode]
	rect: Rect | None = None


@dataclass(slots=True)
class HintMarker:
	"""One overlay label for a group."""

	group: Group
	label: str = ''
	z_index: int = 0

	@property
	def rect(self) -> Rect:
		assert self.group.rect is not None, 'hint marker created for a group without a rect'
		return self.group.rect

	def page_rect(self, scroll_x: float = 0, scroll_y: float = 0) -> Rect:
		"""The marker rectangle in page coordinates for the given scroll offset."""
		return self.rect.translate(scroll_x, scroll_y)

	def to_dict(self) -> dict[str, Any]:
		return {
			'rect': self.rect.to_dict(),
			'label': self.label,
			'z_index': self.z_index,
			'element_ids': [element.id for element in self.group.elements],
		}


@dataclass
class PageStructure:
	"""Everything one extraction pass produced."""

	elements: list[ElementNode]
	element_tree: list[ElementNode]
	hint_markers: list[HintMarker] = field(default_factory=list)
	id_to_xpath: dict[int, str] = field(default_factory=dict)
	timing_info: dict[str, float] = field(default_factory=dict, repr=False)

	@property
	def id_to_element(self) -> dict[int, ElementNode]:
		return {element.id: element for element in self.elements}

	def build_element_tree(self, format: ElementTreeFormat | str = ElementTreeFormat.JSON) -> str:
		"""Export the pruned tree with reduced attributes, as JSON or as markup."""
		from action_dom.dom.serializer.html_serializer import element_to_html, trim_element_tree

		trimmed = trim_element_tree(self.element_tree)
		if format == ElementTreeFormat.JSON:
			return json.dumps([element.model_dump(by_alias=True, exclude_none=True) for element in trimmed])
		elif format == ElementTreeFormat.HTML:
			return ''.join(element_to_html(element) for element in trimmed)
		else:
			raise ValueError(f'Unknown element tree format: {format}')
