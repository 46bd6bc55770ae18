"""User account lookups."""

from uuid import UUID

from rehabtrack.core.database.repository import CassandraRepository

from .models import User


class UserRepository(CassandraRepository):
    """Read access to the users table."""

    def _prepare_statements(self) -> None:
        self._get_user = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.users WHERE id = ?
        """)

    async def get_user(self, user_id: UUID) -> User | None:
        """Get a user by ID."""
        row = await self._fetch_one(self._get_user, [user_id], operation="get_user")
        return User.from_row(row) if row else None
