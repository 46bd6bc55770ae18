"""Database access for RehabTrack.

Connection setup lives in ``async_cassandra`` and is imported by the
application entrypoint only, since it pulls in every domain's table
definitions.
"""

from rehabtrack.core.database.repository import CassandraRepository


__all__ = ["CassandraRepository"]
