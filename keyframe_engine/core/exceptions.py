"""
Exception hierarchy for the keyframe engine.

The authoring surface never lets these escape: composer calls catch
ValidationError and report it, objects report unknown properties and
return False. They surface only for internal invariant violations and
project file I/O.
"""

from typing import Any, Dict, Optional


class KeyframeEngineError(Exception):
    """Base exception carrying a message and a details mapping."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({detail_str})"


class ValidationError(KeyframeEngineError):
    """Caller supplied malformed input (bad keyframe list, empty group, ...)."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs):
        details = kwargs.copy()
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, details)


class TimelineError(KeyframeEngineError):
    """A property timeline was used in a state callers must never produce."""

    def __init__(self, message: str, property_name: Optional[str] = None, **kwargs):
        details = kwargs.copy()
        if property_name:
            details["property"] = property_name
        super().__init__(message, details)


class SerializationError(KeyframeEngineError):
    """A project payload or file could not be read."""

    def __init__(self, message: str, path=None, **kwargs):
        details = kwargs.copy()
        if path is not None:
            details["path"] = str(path)
        super().__init__(message, details)


__all__ = [
    "KeyframeEngineError",
    "ValidationError",
    "TimelineError",
    "SerializationError",
]
