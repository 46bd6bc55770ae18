"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current principal extraction from JWT
- Role-based access control
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from jose import JWTError

from rehabtrack.auth.permissions import UserRole
from rehabtrack.auth.schemas import Principal
from rehabtrack.auth.security import decode_access_token
from rehabtrack.core.context import set_user
from rehabtrack.core.errors import UnauthenticatedError, UnauthorizedError
from rehabtrack.core.http import handle_engine_error


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Principal:
    """Get the authenticated principal from the JWT access token.

    Raises:
        EngineHTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise handle_engine_error(UnauthenticatedError())

    try:
        payload = decode_access_token(token)
        principal = Principal(
            id=UUID(payload["sub"]),
            role=payload["role"],
            email=payload.get("email"),
        )
    except (JWTError, ValueError) as e:
        raise handle_engine_error(
            UnauthenticatedError("Invalid or expired token", "invalid_token")
        ) from e

    # Attach to context for logging
    set_user(principal.id, principal.role)
    return principal


def require_role(*allowed_roles: UserRole):
    """Create dependency requiring one of the given roles (exact match)."""

    async def role_checker(
        user: Annotated[Principal, Depends(get_current_user)],
    ) -> Principal:
        if user.role not in {role.value for role in allowed_roles}:
            raise handle_engine_error(UnauthorizedError("Insufficient permissions"))
        return user

    return role_checker


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

PatientUser = Annotated[Principal, Depends(require_role(UserRole.PATIENT))]
AdminUser = Annotated[Principal, Depends(require_role(UserRole.ADMIN))]
