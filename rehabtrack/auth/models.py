"""Database models for user accounts.

Accounts are provisioned by the identity provider; the engine reads them
to confirm that a referenced patient exists and has the patient role.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from rehabtrack.auth.permissions import UserRole
from rehabtrack.core.dates import ensure_utc_aware, to_date, utcnow


USERS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    email TEXT,
    role TEXT,
    first_name TEXT,
    last_name TEXT,
    date_of_birth DATE,
    is_active BOOLEAN,
    created_at TIMESTAMP
)
"""

AUTH_TABLES_CQL = [USERS_TABLE_CQL]


class User:
    """User account.

    Attributes:
        id: User UUID
        email: Login email
        role: Role name (see UserRole)
        first_name: Given name, None if not provided
        last_name: Family name, None if not provided
        date_of_birth: None means unknown
        is_active: Inactive accounts are treated as absent
        created_at: Creation timestamp
    """

    def __init__(
        self,
        id: UUID,
        email: str,
        role: str = UserRole.USER.value,
        first_name: str | None = None,
        last_name: str | None = None,
        date_of_birth: date | None = None,
        is_active: bool = True,
        created_at: datetime | None = None,
    ):
        self.id = id
        self.email = email
        self.role = role
        self.first_name = first_name
        self.last_name = last_name
        self.date_of_birth = date_of_birth
        self.is_active = is_active
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @property
    def is_patient(self) -> bool:
        """Check if the account is an active patient."""
        return self.is_active and self.role == UserRole.PATIENT.value

    @classmethod
    def from_row(cls, row: Any) -> "User":
        """Create User from Cassandra row."""
        return cls(
            id=row.id,
            email=row.email,
            role=row.role or UserRole.USER.value,
            first_name=row.first_name,
            last_name=row.last_name,
            date_of_birth=to_date(row.date_of_birth),
            is_active=row.is_active if row.is_active is not None else True,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.role}>"
