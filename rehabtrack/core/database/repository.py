"""Base class for Cassandra-backed repositories.

Repositories own the prepared statements for their tables and translate
rows into entities. Driver failures are logged with full detail and
re-raised as ``DependencyFailureError`` so callers never see store internals.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from rehabtrack.core.errors import DependencyFailureError


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class CassandraRepository:
    """Shared plumbing for repositories using a Cassandra session."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session and prepare statements."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements. Subclasses override."""

    async def _execute(
        self,
        statement: Any,
        params: Sequence[Any] | None = None,
        *,
        operation: str,
    ) -> Any:
        """Run a statement, wrapping driver errors."""
        try:
            return await self.session.aexecute(statement, params)
        except (DriverException, NoHostAvailable) as e:
            logger.error(
                "record_store_error",
                repository=type(self).__name__,
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise DependencyFailureError from e

    async def _fetch_one(
        self, statement: Any, params: Sequence[Any], *, operation: str
    ) -> Any | None:
        result = await self._execute(statement, params, operation=operation)
        return result.one()

    async def _fetch_all(
        self, statement: Any, params: Sequence[Any], *, operation: str
    ) -> list[Any]:
        result = await self._execute(statement, params, operation=operation)
        return list(result)
