"""Action-oriented structural snapshots of rendered web pages"""

import os
from typing import TYPE_CHECKING

from action_dom.logging_config import setup_logging

# Setup logging
if os.environ.get('ACTION_DOM_SETUP_LOGGING', 'true').lower() != 'false':
	from action_dom.config import CONFIG

	debug_log_file = getattr(CONFIG, 'ACTION_DOM_DEBUG_LOG_FILE', None)
	logger = setup_logging(debug_log_file=debug_log_file)
else:
	import logging

	logger = logging.getLogger('action_dom')

if TYPE_CHECKING:
	from action_dom.browser.playwright_document import PlaywrightDocument
	from action_dom.dom.service import DomService
	from action_dom.dom.views import ElementNode, ElementTreeFormat, HintMarker, PageStructure
	from action_dom.exceptions import ElementAccessError, ExtractionError, MalformedTreeError

# Lazy imports mapping, keeps playwright out of the import path until a binding is needed
_LAZY_IMPORTS = {
	'DomService': ('action_dom.dom.service', 'DomService'),
	'PageStructure': ('action_dom.dom.views', 'PageStructure'),
	'ElementNode': ('action_dom.dom.views', 'ElementNode'),
	'ElementTreeFormat': ('action_dom.dom.views', 'ElementTreeFormat'),
	'HintMarker': ('action_dom.dom.views', 'HintMarker'),
	'PlaywrightDocument': ('action_dom.browser.playwright_document', 'PlaywrightDocument'),
	'ExtractionError': ('action_dom.exceptions', 'ExtractionError'),
	'ElementAccessError': ('action_dom.exceptions', 'ElementAccessError'),
	'MalformedTreeError': ('action_dom.exceptions', 'MalformedTreeError'),
}


def __getattr__(name: str):
	"""Lazy import mechanism."""
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		try:
			from importlib import import_module

			module = import_module(module_path)
			attr = getattr(module, attr_name)
			globals()[name] = attr
			return attr
		except ImportError as e:
			raise ImportError(f'Failed to import {name} from {module_path}: {e}') from e
	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
	'DomService',
	'PageStructure',
	'ElementNode',
	'ElementTreeFormat',
	'HintMarker',
	'PlaywrightDocument',
	'ExtractionError',
	'ElementAccessError',
	'MalformedTreeError',
]
