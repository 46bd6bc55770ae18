"""Identity and role checks."""

from rehabtrack.auth.permissions import UserRole, require_admin, require_patient
from rehabtrack.auth.schemas import Principal


__all__ = ["Principal", "UserRole", "require_admin", "require_patient"]
