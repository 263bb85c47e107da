"""Exceptions raised by the extraction engine."""

from typing import Any


class ExtractionError(Exception):
	"""Base class for all extraction errors"""

	message: str
	details: dict[str, Any] | None = None

	def __init__(self, message: str, details: dict[str, Any] | None = None):
		self.message = message
		super().__init__(message)
		self.details = details

	def __str__(self) -> str:
		if self.details:
			return f'{self.message} ({self.details})'
		return self.message


class ElementAccessError(ExtractionError):
	"""Raised by a document binding when a live element can no longer be queried (detached, navigated away...)"""


class MalformedTreeError(ExtractionError):
	"""Raised when a pass produced a registry/forest that violates the tree contract"""
