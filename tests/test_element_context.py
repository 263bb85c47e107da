"""Tests for element text extraction and the context resolver."""

from action_dom.dom.context import ContextResolver
from action_dom.dom.utils import (
	build_xpath,
	check_required_from_style,
	cleanup_text,
	get_element_content,
	get_element_context,
)
from action_dom.dom.views import ElementNode
from tests.dom_fixtures import FakeDocument, FakeElement

MARKER = 'unique_id'


def resolve(document: FakeDocument, element: FakeElement, deep_context: bool = False, node: ElementNode | None = None):
	node = node or ElementNode(id=0, tag_name=element.tag_name)
	context = ContextResolver(document, MARKER, deep_context).resolve(node, element)
	return node, context


class TestElementContent:
	def test_pieces_are_joined_with_semicolons(self):
		element = FakeElement('div', children=['  Hello ', FakeElement('b', children=['big']), ' world '])
		assert get_element_content(element) == 'Hello;big;world'

	def test_whitespace_is_collapsed_and_svg_fallback_removed(self):
		assert cleanup_text('  a \n\t b SVGs not supported by this browser. ') == 'a b'

	def test_skipped_element_contributes_nothing(self):
		skipped = FakeElement('input')
		label = FakeElement('label', children=['Name', FakeElement('span', children=[skipped, 'inner'])])
		assert get_element_content(label, skipped) == 'Name;inner'
		assert get_element_content(skipped, skipped) == ''

	def test_oversize_content_falls_back_to_own_text(self):
		element = FakeElement('div', children=['Own text', FakeElement('p', children=['x' * 5001])])
		assert get_element_content(element) == 'Own text'

	def test_oversize_own_text_gives_empty_content(self):
		element = FakeElement('div', children=['y' * 5001])
		assert get_element_content(element) == ''

	def test_content_of_exactly_the_limit_is_kept(self):
		element = FakeElement('div', children=['z' * 5000])
		assert get_element_content(element) == 'z' * 5000


class TestElementContext:
	def test_marked_children_are_skipped(self):
		container = FakeElement(
			'div',
			children=[
				'Shipping',
				FakeElement('input', {MARKER: '3'}),
				FakeElement('span', children=['optional']),
			],
		)
		assert get_element_context(container, MARKER) == 'Shipping;optional'

	def test_text_of_a_marked_node_is_skipped(self):
		label = FakeElement('label', {MARKER: '1'}, children=['Remember me', FakeElement('small', children=['30 days'])])
		assert get_element_context(label, MARKER) == '30 days'

	def test_required_marker_from_after_content_comes_first(self):
		label = FakeElement('label', children=['Email'], after_content='*')
		assert get_element_context(label, MARKER) == '*;Email'

	def test_other_after_content_is_ignored(self):
		label = FakeElement('label', children=['Email'], after_content=':')
		assert get_element_context(label, MARKER) == 'Email'

	def test_required_from_style(self):
		assert check_required_from_style(FakeElement('label', after_content='✱'))
		assert check_required_from_style(FakeElement('div', {'class': 'form-group is-Required'}))
		assert not check_required_from_style(FakeElement('div', {'class': 'form-group'}))


class TestContextResolver:
	def test_label_for_and_aria_references_in_order(self):
		field = FakeElement('input', {'id': 'email', 'aria-labelledby': 'heading', 'aria-describedby': 'hint'})
		document = FakeDocument(
			FakeElement('h2', {'id': 'heading'}, children=['Contact']),
			FakeElement('label', {'for': 'email'}, children=['Email address']),
			field,
			FakeElement('p', {'id': 'hint'}, children=['We never share it']),
		)
		node, context = resolve(document, field)
		assert context == 'Email address;Contact;We never share it'
		assert node.context == context

	def test_nearest_label_ancestor(self):
		field = FakeElement('input', {MARKER: '0'})
		document = FakeDocument(
			FakeElement('label', children=['Outer', FakeElement('div', children=[FakeElement('label', children=['Inner', field])])])
		)
		_, context = resolve(document, field)
		assert context == 'Inner'

	def test_fieldset_uses_its_parent(self):
		field = FakeElement('input', {MARKER: '0'})
		fieldset = FakeElement('fieldset', children=[FakeElement('legend', children=['Inside']), field])
		document = FakeDocument(FakeElement('section', children=['Billing', fieldset]))
		_, context = resolve(document, field)
		assert context == 'Billing;Inside'

	def test_field_classes_only_match_in_deep_mode(self):
		field = FakeElement('input', {MARKER: '0'})
		document = FakeDocument(FakeElement('div', {'class': 'Form-Field'}, children=['City', field]))
		assert resolve(document, field, deep_context=False)[1] == ''
		assert resolve(document, field, deep_context=True)[1] == 'City'

	def test_ancestors_beyond_ten_levels_are_ignored(self):
		field = FakeElement('input', {MARKER: '0'})
		wrapper = field
		for _ in range(10):
			wrapper = FakeElement('div', children=[wrapper])
		document = FakeDocument(FakeElement('label', children=['Too far', wrapper]))
		assert resolve(document, field)[1] == ''

	def test_table_links_get_row_and_cell_context(self):
		link = FakeElement('a', {'href': '/invoice/7', MARKER: '0'}, children=['Open'])
		row = FakeElement(
			'tr',
			children=[FakeElement('td', children=['Invoice 7']), FakeElement('td', children=['Due', link])],
		)
		document = FakeDocument(FakeElement('table', children=[FakeElement('tbody', children=[row])]))
		node = ElementNode(id=0, tag_name='a')
		_, context = resolve(document, link, node=node)
		assert context == 'Invoice 7;Due;Due'

	def test_links_outside_tables_get_no_table_context(self):
		link = FakeElement('a', {'href': '/', MARKER: '0'}, children=['Home'])
		document = FakeDocument(FakeElement('nav', children=['Menu', link]))
		assert resolve(document, link)[1] == ''

	def test_context_of_exactly_the_limit_is_kept(self):
		field = FakeElement('input', {'id': 'f'})
		document = FakeDocument(FakeElement('label', {'for': 'f'}, children=['c' * 5000]), field)
		node, _ = resolve(document, field)
		assert node.context == 'c' * 5000

	def test_context_over_the_limit_is_dropped(self):
		field = FakeElement('input', {'id': 'f'})
		document = FakeDocument(
			FakeElement('label', {'for': 'f'}, children=['a' * 2500]),
			FakeElement('label', {'for': 'f'}, children=['b' * 2500]),
			field,
		)
		node, context = resolve(document, field)
		assert len(context) == 5001
		assert node.context is None

	def test_required_is_inferred_from_context_in_deep_mode(self):
		field = FakeElement('input', {'id': 'f'})
		document = FakeDocument(FakeElement('label', {'for': 'f'}, children=['Name (required)']), field)

		node, _ = resolve(document, field, deep_context=False)
		assert 'required' not in node.attributes

		node, _ = resolve(document, field, deep_context=True)
		assert node.attributes['required'] is True

	def test_required_is_not_overwritten(self):
		field = FakeElement('input', {'id': 'f'})
		document = FakeDocument(FakeElement('label', {'for': 'f'}, children=['Name *']), field)
		node = ElementNode(id=0, tag_name='input', attributes={'aria-required': True})
		resolve(document, field, deep_context=True, node=node)
		assert 'required' not in node.attributes


class TestBuildXpath:
	def test_positions_only_for_repeated_tags(self):
		target = FakeElement('input')
		document = FakeDocument(FakeElement('form', children=[FakeElement('input'), FakeElement('span'), target]))
		assert build_xpath(target) == '/html/body/form/input[2]'
		assert build_xpath(document.body) == '/html/body'
