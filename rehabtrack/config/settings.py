"""Application settings using Pydantic Settings.

Values come from the environment or a local ``.env`` file. List settings
accept either JSON arrays or comma-separated strings
(``CASSANDRA_HOSTS=cass-1,cass-2``).
"""

from functools import lru_cache
from typing import Annotated, Literal

import orjson
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEV_SECRET_KEY = "dev-jwt-secret-key-change-in-production-32chars!"

StrList = Annotated[list[str], NoDecode]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="rehabtrack", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )

    # Authentication (tokens are issued by the identity provider)
    auth_secret_key: str = Field(
        default=DEV_SECRET_KEY,
        min_length=32,
        description="Shared JWT signing key",
    )
    auth_algorithm: str = Field(default="HS256", description="JWT algorithm")
    auth_access_token_expire_minutes: int = Field(
        default=15, gt=0, description="Lifetime of tokens minted by create_access_token"
    )

    # Cassandra
    cassandra_hosts: StrList = Field(
        default=["localhost"], description="Contact points"
    )
    cassandra_port: int = Field(default=9042, description="Native protocol port")
    cassandra_keyspace: str = Field(
        default="rehabtrack", pattern=r"^[a-z][a-z0-9_]*$", description="Keyspace"
    )
    cassandra_username: str | None = Field(default=None, description="Cassandra user")
    cassandra_password: str | None = Field(default=None, description="Cassandra password")
    cassandra_protocol_version: int = Field(default=4, description="Protocol version")
    cassandra_connect_timeout: float = Field(default=10.0, description="Seconds")
    cassandra_request_timeout: float = Field(default=10.0, description="Seconds")
    cassandra_datacenter: str = Field(
        default="datacenter1",
        description="Datacenter used by NetworkTopologyStrategy outside development",
    )
    cassandra_replication_factor: int = Field(
        default=1, ge=1, description="Replicas per datacenter for a new keyspace"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Console renderer (files are always JSON)"
    )
    log_include_caller_info: bool = Field(
        default=True, description="Add module, function and line to events"
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Rotate after this many bytes"
    )
    log_file_backup_count: int = Field(default=5, description="Rotated files to keep")
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: StrList = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths to exclude from request logging",
    )
    log_slow_request_ms: float | None = Field(
        default=1000.0, description="Warn about requests slower than this, None disables"
    )

    # CORS
    cors_origins: StrList = Field(default=["*"], description="CORS origins")
    cors_allow_credentials: bool = Field(default=True, description="Allow credentials")
    cors_allow_methods: StrList = Field(default=["*"], description="Allowed methods")
    cors_allow_headers: StrList = Field(default=["*"], description="Allowed headers")
    cors_max_age: int = Field(default=600, description="Preflight cache (seconds)")

    @field_validator(
        "cassandra_hosts",
        "log_exclude_paths",
        "cors_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def split_comma_separated(cls, value: object) -> object:
        """Accept ``a,b,c`` in addition to JSON arrays."""
        if not isinstance(value, str):
            return value
        if value.lstrip().startswith("["):
            return orjson.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]

    @model_validator(mode="after")
    def check_production_secrets(self) -> "Settings":
        """Refuse to run production with the development signing key."""
        if self.is_production and self.auth_secret_key == DEV_SECRET_KEY:
            raise ValueError("AUTH_SECRET_KEY must be set in production")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
