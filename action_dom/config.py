"""Configuration for action-dom, read lazily from the environment."""

import logging
import os
from typing import Any

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = logging.getLogger(__name__)


class OldConfig:
	"""Environment-backed settings with the conversions the rest of the package expects."""

	@property
	def ACTION_DOM_LOGGING_LEVEL(self) -> str:
		return os.getenv('ACTION_DOM_LOGGING_LEVEL', 'info').lower()

	@property
	def ACTION_DOM_DEEP_CONTEXT(self) -> bool:
		return os.getenv('ACTION_DOM_DEEP_CONTEXT', 'true').lower()[:1] in 'ty1'

	@property
	def ACTION_DOM_MARKER_ATTRIBUTE(self) -> str:
		attribute = os.getenv('ACTION_DOM_MARKER_ATTRIBUTE', 'unique_id').strip()
		assert attribute and ' ' not in attribute, 'ACTION_DOM_MARKER_ATTRIBUTE must be a single attribute name'
		return attribute


class FlatEnvConfig(BaseSettings):
	"""All environment variables in a flat namespace."""

	model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=True, extra='allow')

	# Logging
	ACTION_DOM_LOGGING_LEVEL: str = Field(default='info')
	ACTION_DOM_DEBUG_LOG_FILE: str | None = Field(default=None)
	ACTION_DOM_SETUP_LOGGING: bool = Field(default=True)

	# Extraction
	ACTION_DOM_DEEP_CONTEXT: bool = Field(default=True)
	ACTION_DOM_MARKER_ATTRIBUTE: str = Field(default='unique_id')

	# Test-only switches
	ACTION_DOM_BROWSER_TESTS: bool = Field(default=False)


class Config:
	"""Configuration facade that re-reads the environment on every access."""

	def __getattr__(self, attribute_name: str) -> Any:
		if attribute_name.startswith('_'):
			raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{attribute_name}'")

		legacy_config = OldConfig()
		if hasattr(legacy_config, attribute_name):
			return getattr(legacy_config, attribute_name)

		env_config = FlatEnvConfig()
		if hasattr(env_config, attribute_name):
			return getattr(env_config, attribute_name)

		raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{attribute_name}'")


CONFIG = Config()
