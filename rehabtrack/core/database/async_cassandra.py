"""Async Cassandra database connection using cassandra-asyncio-driver.

Provides:
- Connection lifecycle management
- Session with aexecute() for non-blocking queries
- Keyspace and table initialization

The cassandra-asyncio-driver extends the standard cassandra-driver
with `session.aexecute()` method for async/await support.
"""

import time

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from rehabtrack.access.models import ACCESS_TABLES_CQL
from rehabtrack.assessments.models import ASSESSMENT_TABLES_CQL
from rehabtrack.auth.models import AUTH_TABLES_CQL
from rehabtrack.catalog.models import CATALOG_TABLES_CQL
from rehabtrack.config.settings import get_settings
from rehabtrack.mood.models import MOOD_TABLES_CQL
from rehabtrack.progress.models import PROGRESS_TABLES_CQL


logger = structlog.get_logger(__name__)

# Table groups created at startup, in dependency order
SCHEMA_GROUPS: dict[str, list[str]] = {
    "auth": AUTH_TABLES_CQL,
    "catalog": CATALOG_TABLES_CQL,
    "access": ACCESS_TABLES_CQL,
    "progress": PROGRESS_TABLES_CQL,
    "assessments": ASSESSMENT_TABLES_CQL,
    "mood": MOOD_TABLES_CQL,
}


class AsyncCassandraConnection:
    """Async Cassandra connection manager.

    Connection is established synchronously; queries run through aexecute().
    """

    _cluster: Cluster | None = None
    _session = None  # Session type from cassandra_asyncio

    @classmethod
    def connect(cls):
        """Establish connection to the Cassandra cluster.

        Raises:
            ConnectionError: If connection fails
        """
        if cls._session is not None:
            return cls._session

        settings = get_settings()

        auth_provider = None
        if settings.cassandra_username and settings.cassandra_password:
            auth_provider = PlainTextAuthProvider(
                username=settings.cassandra_username,
                password=settings.cassandra_password,
            )

        cls._cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth_provider,
            protocol_version=settings.cassandra_protocol_version,
            load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
            connect_timeout=settings.cassandra_connect_timeout,
        )

        try:
            cls._session = cls._cluster.connect()
            cls._session.default_timeout = settings.cassandra_request_timeout
            logger.info(
                "cassandra_connected",
                hosts=settings.cassandra_hosts,
                port=settings.cassandra_port,
            )
        except Exception as e:
            logger.error("cassandra_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        return cls._session

    @classmethod
    def disconnect(cls) -> None:
        """Close connection to Cassandra."""
        if cls._session is not None:
            cls._session.shutdown()
            cls._session = None
        if cls._cluster is not None:
            cls._cluster.shutdown()
            cls._cluster = None
            logger.info("cassandra_disconnected")

    @classmethod
    def is_connected(cls) -> bool:
        """Check if connection is active."""
        return cls._session is not None and not cls._session.is_shutdown

    @classmethod
    async def ping(cls) -> float:
        """Round-trip a trivial query and return its latency in milliseconds.

        Raises:
            ConnectionError: Not connected
        """
        if not cls.is_connected():
            raise ConnectionError("Cassandra is not connected")
        start = time.perf_counter()
        await cls._session.aexecute("SELECT release_version FROM system.local")
        return round((time.perf_counter() - start) * 1000, 2)


async def init_async_keyspace(session, keyspace: str) -> None:
    """Create keyspace if not exists."""
    settings = get_settings()

    factor = settings.cassandra_replication_factor
    if settings.is_development or settings.environment == "testing":
        replication = f"'class': 'SimpleStrategy', 'replication_factor': {factor}"
    else:
        replication = (
            f"'class': 'NetworkTopologyStrategy', "
            f"'{settings.cassandra_datacenter}': {factor}"
        )

    await session.aexecute(
        f"CREATE KEYSPACE IF NOT EXISTS {keyspace} "
        f"WITH replication = {{{replication}}} AND durable_writes = true"
    )
    logger.info("keyspace_created", keyspace=keyspace)


async def init_async_tables(session, keyspace: str) -> None:
    """Create every table group in ``SCHEMA_GROUPS``."""
    for group, statements in SCHEMA_GROUPS.items():
        for cql_template in statements:
            await session.aexecute(cql_template.format(keyspace=keyspace))
        logger.info("tables_created", group=group, keyspace=keyspace)


async def init_async_cassandra():
    """Connect and ensure keyspace and tables exist.

    Returns:
        Configured Cassandra session with aexecute() support
    """
    settings = get_settings()

    session = AsyncCassandraConnection.connect()
    await init_async_keyspace(session, settings.cassandra_keyspace)
    session.set_keyspace(settings.cassandra_keyspace)
    await init_async_tables(session, settings.cassandra_keyspace)

    logger.info("cassandra_initialized", keyspace=settings.cassandra_keyspace)
    return session


async def shutdown_async_cassandra() -> None:
    """Shutdown async Cassandra connection."""
    AsyncCassandraConnection.disconnect()
