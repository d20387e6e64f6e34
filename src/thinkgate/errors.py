from __future__ import annotations


class ThinkgateError(Exception):
    """Base class for errors raised inside thinkgate."""


class ThoughtValidationError(ThinkgateError, ValueError):
    """A sequential_thinking call carried a missing or malformed field."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class BackendUnavailableError(ThinkgateError, RuntimeError):
    """The model backend for a tool has no usable credential."""


class BackendCallError(ThinkgateError, RuntimeError):
    """The model backend rejected or failed a request."""
