# Core infrastructure
from rehabtrack.core.context import (
    clear_context,
    get_context,
    get_request_id,
    set_request_id,
    set_user,
)
from rehabtrack.core.errors import (
    DependencyFailureError,
    EngineError,
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
    UnauthorizedError,
)
from rehabtrack.core.logging import configure_structlog, get_logger


__all__ = [
    "DependencyFailureError",
    "EngineError",
    "ErrorKind",
    "InvalidInputError",
    "NotFoundError",
    "UnauthenticatedError",
    "UnauthorizedError",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "set_request_id",
    "set_user",
]
