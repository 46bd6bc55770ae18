"""HTTP mapping for engine errors."""

from fastapi import HTTPException, status

from .errors import EngineError, ErrorKind


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.DEPENDENCY_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class EngineHTTPException(HTTPException):
    """HTTPException that remembers the engine error kind."""

    def __init__(self, status_code: int, detail: str, kind: ErrorKind):
        headers = (
            {"WWW-Authenticate": "Bearer"}
            if kind is ErrorKind.UNAUTHENTICATED
            else None
        )
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.kind = kind


def handle_engine_error(error: EngineError) -> EngineHTTPException:
    """Convert engine errors to HTTP exceptions.

    Args:
        error: Engine error

    Returns:
        HTTPException with the status code for the error kind
    """
    return EngineHTTPException(
        status_code=STATUS_BY_KIND.get(
            error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail=error.message,
        kind=error.kind,
    )
