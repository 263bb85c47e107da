import logging
import sys

from action_dom.config import CONFIG


def addLoggingLevel(name: str, level_value: int, method_name: str | None = None):
	"""
	Comprehensively adds a new logging level to the `logging` module and the
	currently configured logging class.

	`name` becomes an attribute of the `logging` module with the value
	`level_value`. `method_name` becomes a convenience method for both `logging`
	itself and the class returned by `logging.getLoggerClass()`. If
	`method_name` is not specified, `name.lower()` is used.

	Raises `AttributeError` if the level name is already an attribute of the
	`logging` module or if the method name is already present.

	Example
	-------
	>>> addLoggingLevel('TRACE', logging.DEBUG - 5)
	>>> logging.getLogger(__name__).setLevel('TRACE')
	>>> logging.getLogger(__name__).trace('that worked')
	>>> logging.TRACE
	5

	"""
	if not method_name:
		method_name = name.lower()

	if hasattr(logging, name):
		raise AttributeError(f'{name} already defined in logging module')
	if hasattr(logging, method_name):
		raise AttributeError(f'{method_name} already defined in logging module')
	if hasattr(logging.getLoggerClass(), method_name):
		raise AttributeError(f'{method_name} already defined in logger class')

	def log_at_level(self, message, *args, **kwargs):
		if self.isEnabledFor(level_value):
			self._log(level_value, message, args, **kwargs)

	def log_to_root(message, *args, **kwargs):
		logging.log(level_value, message, *args, **kwargs)

	logging.addLevelName(level_value, name)
	setattr(logging, name, level_value)
	setattr(logging.getLoggerClass(), method_name, log_at_level)
	setattr(logging, method_name, log_to_root)


class ActionDomFormatter(logging.Formatter):
	def __init__(self, format_string, level_value):
		super().__init__(format_string)
		self.level_value = level_value

	def format(self, record):
		# Shorten names only at INFO and above, keep the full dotted path in DEBUG mode
		if self.level_value > logging.DEBUG and isinstance(record.name, str) and record.name.startswith('action_dom.'):
			if '.dom.' in record.name or record.name.endswith('.dom'):
				record.name = 'dom'
			elif '.browser.' in record.name:
				record.name = 'browser'
			else:
				record.name = record.name.split('.')[-1]
		return super().format(record)


def setup_logging(stream=None, log_level=None, force_setup=False, debug_log_file=None):
	"""Set up logging for action-dom.

	Args:
		stream: Output stream for logs (default: sys.stdout)
		log_level: 'debug', 'info' or 'result' (default: CONFIG.ACTION_DOM_LOGGING_LEVEL)
		force_setup: Reconfigure even if handlers already exist
		debug_log_file: Path to a file receiving debug level logs
	"""
	try:
		addLoggingLevel('RESULT', 35)
	except AttributeError:
		pass

	log_type = log_level or CONFIG.ACTION_DOM_LOGGING_LEVEL

	if logging.getLogger().hasHandlers() and not force_setup:
		return logging.getLogger('action_dom')

	root = logging.getLogger()
	root.handlers = []

	if log_type == 'result':
		level = 35
	elif log_type == 'debug':
		level = logging.DEBUG
	else:
		level = logging.INFO

	console = logging.StreamHandler(stream or sys.stdout)
	if log_type == 'result':
		console.setLevel('RESULT')
		console.setFormatter(ActionDomFormatter('%(message)s', level))
	else:
		console.setLevel(level)
		console.setFormatter(ActionDomFormatter('%(levelname)-8s [%(name)s] %(message)s', level))
	root.addHandler(console)

	file_handlers = []
	if debug_log_file:
		debug_handler = logging.FileHandler(debug_log_file, encoding='utf-8')
		debug_handler.setLevel(logging.DEBUG)
		debug_handler.setFormatter(ActionDomFormatter('%(asctime)s - %(levelname)-8s [%(name)s] %(message)s', logging.DEBUG))
		file_handlers.append(debug_handler)
		root.addHandler(debug_handler)

	final_level = logging.DEBUG if debug_log_file else level
	root.setLevel(final_level)

	action_dom_logger = logging.getLogger('action_dom')
	action_dom_logger.propagate = False
	action_dom_logger.addHandler(console)
	for handler in file_handlers:
		action_dom_logger.addHandler(handler)
	action_dom_logger.setLevel(final_level)

	# Silence third-party loggers
	for name in ['playwright', 'asyncio', 'urllib3', 'websockets']:
		third_party = logging.getLogger(name)
		third_party.setLevel(logging.ERROR)
		third_party.propagate = False

	return action_dom_logger
