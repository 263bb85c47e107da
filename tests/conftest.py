"""
Shared fixtures for the action-dom test suite.

Logging setup on import is disabled so pytest's caplog keeps seeing records
from the action_dom loggers.
"""

import os

os.environ.setdefault('ACTION_DOM_SETUP_LOGGING', 'false')

import pytest

from action_dom.dom.geometry import Rect
from action_dom.dom.views import ElementNode
from tests.dom_fixtures import FakeDocument, FakeElement


def create_node(
	id: int,
	tag_name: str = 'div',
	text: str = '',
	attributes: dict | None = None,
	children: list[ElementNode] | None = None,
	rect: Rect | None = None,
	context: str | None = None,
	options: list | None = None,
) -> ElementNode:
	"""Create an ElementNode the way the tree builder would."""
	return ElementNode(
		id=id,
		tag_name=tag_name,
		attributes=attributes or {},
		text=text,
		children=children or [],
		rect=rect,
		context=context,
		options=options,
	)


@pytest.fixture
def login_form_document() -> FakeDocument:
	"""A small login form: labelled inputs, a remember-me checkbox and a submit button."""
	return FakeDocument(
		FakeElement(
			'form',
			children=[
				FakeElement('label', {'for': 'email'}, children=['Email'], rect=Rect.create(10, 10, 60, 30)),
				FakeElement('input', {'id': 'email', 'type': 'email', 'name': 'email'}, rect=Rect.create(70, 10, 270, 30)),
				FakeElement('label', {'for': 'password'}, children=['Password'], rect=Rect.create(10, 40, 60, 60)),
				FakeElement(
					'input',
					{'id': 'password', 'type': 'password', 'name': 'password', 'required': ''},
					rect=Rect.create(70, 40, 270, 60),
				),
				FakeElement(
					'label',
					children=[
						FakeElement('input', {'type': 'checkbox', 'name': 'remember'}, rect=Rect.create(10, 70, 25, 85)),
						'Remember me',
					],
					rect=Rect.create(10, 70, 120, 85),
				),
				FakeElement('button', {'type': 'submit'}, children=['Sign in'], rect=Rect.create(10, 100, 90, 125)),
			],
			rect=Rect.create(0, 0, 300, 140),
		)
	)
