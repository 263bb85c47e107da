import logging

from action_dom.dom.document import RenderedElement
from action_dom.exceptions import ElementAccessError

logger = logging.getLogger(__name__)

WIDGET_ROLES = frozenset(
	{
		'button',
		'link',
		'checkbox',
		'menuitem',
		'menuitemcheckbox',
		'menuitemradio',
		'radio',
		'tab',
		'combobox',
		'textbox',
		'searchbox',
		'slider',
		'spinbutton',
		'switch',
		'gridcell',
	}
)

CLICKABLE_INPUT_TYPES = frozenset(
	{
		'button',
		'checkbox',
		'date',
		'datetime-local',
		'email',
		'file',
		'image',
		'month',
		'number',
		'password',
		'radio',
		'range',
		'reset',
		'search',
		'submit',
		'tel',
		'text',
		'time',
		'url',
		'week',
	}
)

INTERACTIVE_TAGS = frozenset({'button', 'select', 'option', 'textarea'})

# 'cursor' is not a real CSS cursor but some pages set it anyway
INTERACTIVE_CURSORS = frozenset({'pointer', 'cursor'})


def is_element_visible(element: RenderedElement) -> bool:
	if element.tag_name == 'option':
		parent = element.parent
		return parent is not None and is_element_visible(parent)

	style = element.computed_style()
	if style is None:
		return True
	if style.get('display') == 'contents':
		return any(is_element_visible(child) for child in element.children())
	if not ClickableElementDetector._is_style_visibility_visible(element, style):
		return False
	rect = element.bounding_client_rect()
	return rect.width > 0 and rect.height > 0


class ClickableElementDetector:
	@staticmethod
	def _is_style_visibility_visible(element: RenderedElement, style) -> bool:
		if not element.check_visibility():
			return False
		return style.get('visibility', 'visible') == 'visible'

	@staticmethod
	def _is_hidden_or_disabled(element: RenderedElement) -> bool:
		style = element.computed_style()
		return (style is not None and style.get('display') == 'none') or element.hidden or element.disabled

	@staticmethod
	def _is_script_or_style(element: RenderedElement) -> bool:
		return element.tag_name in ('script', 'style')

	@staticmethod
	def _has_widget_role(element: RenderedElement) -> bool:
		role = element.get_attribute('role')
		if not role:
			return False
		return role.lower().strip() in WIDGET_ROLES

	@staticmethod
	def _is_interactable_input(element: RenderedElement) -> bool:
		if element.tag_name != 'input':
			return False
		input_type = element.get_attribute('type')
		if input_type is None:
			input_type = 'text'
		return input_type.lower().strip() in CLICKABLE_INPUT_TYPES

	@staticmethod
	def _is_enabled_label(element: RenderedElement) -> bool:
		if element.tag_name != 'label':
			return False
		control = element.label_control()
		return control is not None and not control.disabled

	@staticmethod
	def _has_event_handlers_or_is_editable(element: RenderedElement) -> bool:
		return element.has_attribute('onclick') or element.is_content_editable or element.has_attribute('jsaction')

	@staticmethod
	def _has_interactive_cursor(element: RenderedElement) -> bool:
		style = element.computed_style() or {}
		return style.get('cursor') in INTERACTIVE_CURSORS

	@staticmethod
	def _has_list_role(element: RenderedElement) -> bool:
		tag_name = element.tag_name
		role = (element.get_attribute('role') or '').lower()
		if tag_name in ('ul', 'div') and role == 'listbox':
			return True
		return tag_name in ('li', 'div') and role == 'option'

	@staticmethod
	def is_interactive(element: RenderedElement) -> bool:
		"""Whether the element is an actionable control. Elements that can't be queried are not."""
		try:
			return ClickableElementDetector._is_interactive(element)
		except ElementAccessError as e:
			logger.debug(f'Treating element as not interactable, it could not be queried: {e}')
			return False

	@staticmethod
	def _is_interactive(element: RenderedElement) -> bool:
		if not is_element_visible(element):
			return False

		if ClickableElementDetector._is_hidden_or_disabled(element):
			return False

		if ClickableElementDetector._is_script_or_style(element):
			return False

		if ClickableElementDetector._has_widget_role(element):
			return True

		if ClickableElementDetector._is_interactable_input(element):
			return True

		tag_name = element.tag_name

		if tag_name == 'a' and element.href:
			return True

		if tag_name in INTERACTIVE_TAGS:
			return True

		if ClickableElementDetector._is_enabled_label(element):
			return True

		if ClickableElementDetector._has_event_handlers_or_is_editable(element):
			return True

		# div/img/span are decided by their cursor alone
		if tag_name in ('div', 'img', 'span'):
			return ClickableElementDetector._has_interactive_cursor(element)

		if ClickableElementDetector._has_list_role(element):
			return True

		return False
