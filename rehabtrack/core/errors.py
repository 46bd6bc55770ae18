"""Error taxonomy shared by the gate, tracker and grader.

Expected business conditions are raised as ``EngineError`` subclasses and
mapped to structured ``{kind, message}`` results at the HTTP boundary.
Domain packages subclass these (``NotEnrolledError(UnauthorizedError)``)
instead of defining parallel hierarchies.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure categories exposed to presentation code."""

    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    DEPENDENCY_FAILURE = "dependency_failure"


class EngineError(Exception):
    """Base error for expected business failures."""

    kind: ErrorKind = ErrorKind.DEPENDENCY_FAILURE
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        self.code = code or self.kind.value
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Structured failure payload for callers."""
        return {"kind": self.kind.value, "message": self.message}


class UnauthenticatedError(EngineError):
    """No authenticated principal."""

    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Not authenticated"


class UnauthorizedError(EngineError):
    """Authenticated but wrong role or not enrolled."""

    kind = ErrorKind.UNAUTHORIZED
    default_message = "Access denied"


class NotFoundError(EngineError):
    """Referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class InvalidInputError(EngineError):
    """Malformed or empty input, rejected before any mutation."""

    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class DependencyFailureError(EngineError):
    """The record store failed; details are logged, never returned."""

    kind = ErrorKind.DEPENDENCY_FAILURE
    default_message = "Service temporarily unavailable"
