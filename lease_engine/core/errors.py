"""
Error taxonomy for the matching engine.

InvalidInput covers structurally malformed requests. Geo precondition
failures subclass it so they surface as InvalidInput at the orchestrator
and HTTP boundaries. Missing data inside a scorer is never an error: it
degrades to a default score instead.
"""

from typing import Any


class EngineError(Exception):
    """Base class for all engine errors."""


class InvalidInput(EngineError, ValueError):
    """Raised when a record or request fails structural validation."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")


class InvalidCoordinate(InvalidInput):
    """Latitude or longitude outside its valid range."""


class InvalidRadius(InvalidInput):
    """Search radius that is zero, negative or not finite."""


class RecordNotFound(EngineError, KeyError):
    """Raised by the record store when an identifier is unknown."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")

    def __str__(self) -> str:
        return f"{self.kind} '{self.record_id}' not found"
