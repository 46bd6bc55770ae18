"""JWT access token handling.

Tokens are issued by the identity provider; this service only needs to
validate them and, for tooling and tests, mint short-lived ones.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from rehabtrack.config.settings import get_settings


ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    user_id: UUID | str,
    role: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for a user.

    Token payload:
        - sub: User ID
        - role: User role
        - email: Optional email
        - exp / iat: Expiry and issue timestamps
        - type: "access"
    """
    settings = get_settings()
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "exp": now
        + (expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)),
        "iat": now,
        "type": ACCESS_TOKEN_TYPE,
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates signature, expiration, token type and required claims.

    Raises:
        JWTError: If token is invalid, expired, or wrong type
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Invalid token type")
    if not payload.get("sub") or not payload.get("role"):
        raise JWTError("Missing required claims")

    return payload
