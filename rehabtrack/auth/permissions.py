"""Role checks for RehabTrack.

Roles are matched exactly, never ranked:
- ADMIN: Manages categories and enrollments
- PATIENT: Consumes content and takes assessments in enrolled programs
- USER: Authenticated account without a clinical role
"""

from enum import Enum
from typing import TYPE_CHECKING

from rehabtrack.core.errors import UnauthenticatedError, UnauthorizedError


if TYPE_CHECKING:
    from rehabtrack.auth.schemas import Principal


class UserRole(str, Enum):
    """User roles."""

    USER = "user"
    PATIENT = "patient"
    ADMIN = "admin"


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    return UserRole.ADMIN.value == (role.value if isinstance(role, UserRole) else role)


def is_patient(role: UserRole | str) -> bool:
    """Check if role is exactly PATIENT."""
    return UserRole.PATIENT.value == (
        role.value if isinstance(role, UserRole) else role
    )


def require_patient(principal: "Principal | None") -> "Principal":
    """Require an authenticated patient principal.

    Progress and grading act on the caller's own records, so only the
    patient role qualifies (admins do not accumulate progress).

    Raises:
        UnauthenticatedError: No principal
        UnauthorizedError: Principal is not a patient
    """
    if principal is None:
        raise UnauthenticatedError
    if not is_patient(principal.role):
        raise UnauthorizedError("Access denied. Patient role required.")
    return principal


def require_admin(principal: "Principal | None") -> "Principal":
    """Require an authenticated admin principal.

    Raises:
        UnauthenticatedError: No principal
        UnauthorizedError: Principal is not an admin
    """
    if principal is None:
        raise UnauthenticatedError
    if not is_admin(principal.role):
        raise UnauthorizedError("Access denied. Admin role required.")
    return principal
