# @file purpose: Exports the pruned element tree as trimmed JSON models or a markup string

import html

from pydantic import BaseModel, ConfigDict, Field

from action_dom.dom.serializer.serializer import trimmed_attributes
from action_dom.dom.views import ElementNode, SelectOption

VOID_TAGS = frozenset({'img', 'input', 'br', 'hr', 'meta', 'link'})

# Node fields folded into the attribute list of the markup export
NODE_FIELDS_AS_ATTRIBUTES = {
	'id': 'unique_id',
	'context': 'context',
	'linked_element': 'linked_element',
}


class ExportedElement(BaseModel):
	"""An element as it is handed to consumers of the structural snapshot."""

	model_config = ConfigDict(populate_by_name=True)

	id: int
	tag_name: str = Field(serialization_alias='tagName')
	attributes: dict[str, str | bool] | None = None
	text: str | None = None
	children: list['ExportedElement'] | None = None
	options: list[SelectOption] | None = None
	context: str | None = None
	linked_element: int | None = None


def _trim_element(element: ElementNode) -> ExportedElement:
	attributes = trimmed_attributes(element.tag_name, element.attributes)
	children = [_trim_element(child) for child in element.children]
	return ExportedElement(
		id=element.id,
		tag_name=element.tag_name,
		attributes=attributes or None,
		text=element.text if element.text and element.text.strip() else None,
		children=children or None,
		options=element.options,
		context=element.context,
		linked_element=element.linked_element,
	)


def trim_element_tree(elements: list[ElementNode]) -> list[ExportedElement]:
	"""Copy of the forest without rects, with reduced attributes and without empty fields."""
	return [_trim_element(element) for element in elements]


def build_attribute(key: str, value: str | bool | int | None) -> str:
	if isinstance(value, bool):
		return f'{key}="{str(value).lower()}"'
	if isinstance(value, int | float):
		return f'{key}="{value}"'
	return f'{key}="{html.escape(str(value))}"' if value else key


def element_to_html(element: ExportedElement) -> str:
	attributes: dict[str, str | bool | int] = dict(element.attributes or {})
	for field_name, attribute_name in NODE_FIELDS_AS_ATTRIBUTES.items():
		field_value = getattr(element, field_name)
		if field_value is not None and field_value != '':
			attributes[attribute_name] = field_value

	attributes_html = ' '.join(build_attribute(key, value) for key, value in attributes.items())
	opening = f'<{element.tag_name}{" " + attributes_html if attributes_html else ""}>'
	if element.tag_name in VOID_TAGS:
		return opening

	text = html.escape(element.text or '', quote=False)
	children_html = ''.join(element_to_html(child) for child in element.children or [])
	options_html = ''.join(
		f'<option index="{option.option_index}">{html.escape(option.text, quote=False)}</option>'
		for option in element.options or []
	)
	return f'{opening}{text}{children_html}{options_html}</{element.tag_name}>'
