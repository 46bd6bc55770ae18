"""Tests for the error taxonomy and its HTTP mapping."""

import pytest

from rehabtrack.access.service import NotEnrolledError, ProgramNotFoundError
from rehabtrack.catalog.content import ContentDecodeError
from rehabtrack.core.errors import (
    DependencyFailureError,
    EngineError,
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
    UnauthorizedError,
)
from rehabtrack.core.http import handle_engine_error


class TestEngineError:
    """Tests for EngineError and its subclasses."""

    def test_to_dict(self) -> None:
        error = NotFoundError("Module not found")
        assert error.to_dict() == {"kind": "not_found", "message": "Module not found"}

    def test_default_message_and_code(self) -> None:
        error = DependencyFailureError()
        assert error.message == "Service temporarily unavailable"
        assert error.code == "dependency_failure"
        assert str(error) == error.message

    def test_domain_errors_keep_their_kind(self) -> None:
        assert NotEnrolledError().kind is ErrorKind.UNAUTHORIZED
        assert NotEnrolledError().code == "not_enrolled"
        assert ProgramNotFoundError().kind is ErrorKind.NOT_FOUND
        assert ContentDecodeError().kind is ErrorKind.DEPENDENCY_FAILURE

    def test_all_errors_are_engine_errors(self) -> None:
        for cls in (
            UnauthenticatedError,
            UnauthorizedError,
            NotFoundError,
            InvalidInputError,
            DependencyFailureError,
        ):
            assert issubclass(cls, EngineError)


class TestHandleEngineError:
    """Tests for the HTTP status mapping."""

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (UnauthenticatedError(), 401),
            (UnauthorizedError(), 403),
            (NotEnrolledError(), 403),
            (NotFoundError(), 404),
            (InvalidInputError(), 422),
            (DependencyFailureError(), 503),
        ],
    )
    def test_status_codes(self, error: EngineError, status_code: int) -> None:
        exc = handle_engine_error(error)
        assert exc.status_code == status_code
        assert exc.detail == error.message
        assert exc.kind is error.kind

    def test_unauthenticated_sets_bearer_challenge(self) -> None:
        exc = handle_engine_error(UnauthenticatedError())
        assert exc.headers == {"WWW-Authenticate": "Bearer"}
