# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv. Backend connection settings can also be built
directly from keyword options with RedisSettings.from_options().
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kvcache.core.errors import ConfigurationError

# Load .env file before any settings are instantiated
load_dotenv()


class Topology(str, Enum):
    """How the backend reaches the Redis-compatible store."""

    DIRECT = "direct"
    SOCKET = "socket"
    URL = "url"
    SENTINEL = "sentinel"
    CLUSTER = "cluster"
    EXTERNAL = "external"


class NodeAddress(BaseModel):
    """Address of a sentinel or cluster node."""

    host: str = Field(..., description="Node hostname or IP")
    port: int = Field(default=6379, description="Node port")


class TlsOptions(BaseModel):
    """TLS options passed through to the Redis client."""

    ca_certs: Optional[str] = Field(default=None, description="Path to CA certificate file")
    certfile: Optional[str] = Field(default=None, description="Path to client certificate file")
    keyfile: Optional[str] = Field(default=None, description="Path to client private key file")
    cert_reqs: Literal["required", "optional", "none"] = Field(
        default="required", description="Server certificate verification mode"
    )
    check_hostname: bool = Field(default=True, description="Verify the server hostname")

    def to_client_kwargs(self) -> dict[str, Any]:
        """Translate to redis-py ``ssl_*`` keyword arguments."""
        return {f"ssl_{name}": value for name, value in self.model_dump().items() if value is not None}


# Option spellings accepted by from_options() besides the field names
OPTION_ALIASES = {
    "sentinelName": "sentinel_name",
    "sentinelPassword": "sentinel_password",
    "replicaReads": "replica_reads",
}

# URL schemes understood by redis.asyncio.from_url()
URL_SCHEMES = ("redis://", "rediss://", "unix://")


class RedisSettings(BaseSettings):
    """Redis connection settings for the cache backend.

    Exactly one topology selector may be given: host/port, socket, url,
    sentinels, cluster or client. When none is given the backend connects
    directly to host/port using their defaults.
    """

    model_config = SettingsConfigDict(env_prefix="KVCACHE_REDIS_")

    # Topology selectors
    host: str = Field(default="127.0.0.1", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    socket: Optional[str] = Field(default=None, description="Unix domain socket path")
    url: Optional[str] = Field(default=None, description="Redis connection URL")
    sentinels: Optional[list[NodeAddress]] = Field(
        default=None, description="Sentinel addresses"
    )
    sentinel_name: Optional[str] = Field(default=None, description="Sentinel master name")
    sentinel_password: Optional[str] = Field(
        default=None, description="Password for the sentinel nodes themselves"
    )
    replica_reads: bool = Field(
        default=False, description="Serve reads from a sentinel-managed replica"
    )
    cluster: Optional[list[NodeAddress]] = Field(default=None, description="Cluster seed nodes")
    client: Any = Field(
        default=None, exclude=True, description="Externally owned, already configured client"
    )

    # Authentication and keyspace
    username: Optional[str] = Field(default=None, description="ACL username")
    password: Optional[str] = Field(default=None, description="Redis password")
    database: Optional[int] = Field(default=None, description="Logical database index")
    db: Optional[int] = Field(default=None, description="Alias of database")
    partition: Optional[str] = Field(default=None, description="Prefix for all storage keys")
    tls: bool | TlsOptions | None = Field(default=None, description="Enable TLS")

    # Client tuning
    socket_timeout: float = Field(default=10, description="Socket timeout in seconds")
    socket_connect_timeout: float = Field(default=10, description="Connect timeout in seconds")
    retries: int = Field(default=3, description="Client retries for transient failures")
    health_check_interval: int = Field(default=30, description="Health check interval in seconds")

    @classmethod
    def from_options(cls, **options: Any) -> "RedisSettings":
        """
        Build settings from keyword options.

        Args:
            **options: Field values; sentinelName style spellings are accepted

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If the options are conflicting or incomplete
        """
        normalized = {OPTION_ALIASES.get(name, name): value for name, value in options.items()}
        try:
            return cls(**normalized)
        except ValidationError as err:
            messages = "; ".join(error["msg"] for error in err.errors())
            raise ConfigurationError(f"Invalid cache configuration: {messages}") from err

    def selected_topologies(self) -> list[Topology]:
        """List every topology selector that was explicitly supplied."""
        selected = []
        if self.client is not None:
            selected.append(Topology.EXTERNAL)
        if self.cluster is not None:
            selected.append(Topology.CLUSTER)
        if self.sentinels is not None:
            selected.append(Topology.SENTINEL)
        if self.url:
            selected.append(Topology.URL)
        if self.socket:
            selected.append(Topology.SOCKET)
        if {"host", "port"} & self.model_fields_set:
            selected.append(Topology.DIRECT)
        return selected

    @property
    def topology(self) -> Topology:
        """The single topology this configuration resolves to."""
        selected = self.selected_topologies()
        return selected[0] if selected else Topology.DIRECT

    @property
    def database_index(self) -> Optional[int]:
        """Database index from either ``database`` or ``db``."""
        return self.database if self.database is not None else self.db

    @property
    def tls_options(self) -> Optional[TlsOptions]:
        """Resolved TLS options, or None when TLS is disabled."""
        if self.tls is True:
            return TlsOptions()
        if isinstance(self.tls, TlsOptions):
            return self.tls
        return None

    @model_validator(mode="after")
    def _check_topology(self) -> "RedisSettings":
        selected = self.selected_topologies()
        if len(selected) > 1:
            names = ", ".join(t.value for t in selected)
            raise ValueError(f"conflicting topology options: {names}")

        if self.url and not self.url.startswith(URL_SCHEMES):
            raise ValueError("url must use the redis://, rediss:// or unix:// scheme")

        if self.sentinels is not None:
            if not self.sentinels:
                raise ValueError("sentinels must list at least one address")
            if not self.sentinel_name:
                raise ValueError("sentinel_name is required when sentinels are set")
        elif self.sentinel_name:
            raise ValueError("sentinel_name requires sentinels")

        if self.replica_reads and self.sentinels is None:
            raise ValueError("replica_reads is only supported with sentinels")

        if self.cluster is not None:
            if not self.cluster:
                raise ValueError("cluster must list at least one node")
            if self.database_index:
                raise ValueError("cluster mode does not support selecting a database")

        if self.database is not None and self.db is not None and self.database != self.db:
            raise ValueError("database and db disagree")

        if self.tls_options is not None:
            if self.socket:
                raise ValueError("tls is not supported over a unix socket")
            if self.url and not self.url.startswith("rediss://"):
                raise ValueError("tls with url requires a rediss:// url")

        return self


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="KVCACHE_",
        extra="ignore",
    )

    # Nested settings
    redis: RedisSettings = Field(default_factory=RedisSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="WARNING", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.

    Raises:
        ConfigurationError: If the environment holds an invalid configuration
    """
    try:
        return Settings()
    except ValidationError as err:
        messages = "; ".join(error["msg"] for error in err.errors())
        raise ConfigurationError(f"Invalid cache configuration: {messages}") from err
