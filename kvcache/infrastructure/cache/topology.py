# ==============================================================================
# Redis Client Construction
# ==============================================================================
"""
Builds redis-py asyncio clients for each supported topology.

Provides:
- Direct host/port, unix socket and URL clients
- Sentinel-managed master (and optional replica) clients
- Cluster clients

Clients are created unconnected; redis-py opens connections lazily on the
first command, which is the readiness probe issued by the backend.
"""

import logging
from typing import Any, Union

from redis.asyncio import Redis, from_url
from redis.asyncio.cluster import ClusterNode, RedisCluster
from redis.asyncio.retry import Retry
from redis.asyncio.sentinel import Sentinel, SentinelManagedSSLConnection
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from kvcache.utils.config import RedisSettings, Topology

logger = logging.getLogger(__name__)

RedisClient = Union[Redis, RedisCluster]


def _common_options(settings: RedisSettings) -> dict[str, Any]:
    """Client options shared by every topology."""
    options: dict[str, Any] = {
        "decode_responses": True,
        "socket_timeout": settings.socket_timeout,
        "socket_connect_timeout": settings.socket_connect_timeout,
        "health_check_interval": settings.health_check_interval,
    }
    if settings.username is not None:
        options["username"] = settings.username
    if settings.password:
        options["password"] = settings.password
    return options


def _retry_options(settings: RedisSettings) -> dict[str, Any]:
    """Retry with exponential backoff for transient failures."""
    return {
        "retry": Retry(ExponentialBackoff(cap=2, base=0.1), retries=settings.retries),
        "retry_on_error": [RedisTimeoutError, RedisConnectionError],
    }


def _tls_options(settings: RedisSettings) -> dict[str, Any]:
    tls = settings.tls_options
    if tls is None:
        return {}
    return tls.to_client_kwargs()


def build_clients(settings: RedisSettings) -> tuple[RedisClient, Redis | None]:
    """
    Create the client(s) for the configured topology.

    Args:
        settings: Validated connection settings (not the external topology)

    Returns:
        Tuple of (primary client, read replica client or None)
    """
    topology = settings.topology
    options = _common_options(settings)
    database = settings.database_index

    if topology is Topology.CLUSTER:
        nodes = [ClusterNode(node.host, node.port) for node in settings.cluster]
        tls = _tls_options(settings)
        if tls:
            options["ssl"] = True
        return RedisCluster(startup_nodes=nodes, **options, **tls), None

    options.update(_retry_options(settings))
    if database is not None:
        options["db"] = database

    if topology is Topology.SENTINEL:
        tls = _tls_options(settings)
        if tls:
            options["connection_class"] = SentinelManagedSSLConnection
            options.update(tls)
        sentinel_kwargs = {"password": settings.sentinel_password} if settings.sentinel_password else {}
        sentinel = Sentinel(
            [(node.host, node.port) for node in settings.sentinels],
            sentinel_kwargs=sentinel_kwargs,
            **options,
        )
        primary = sentinel.master_for(settings.sentinel_name)
        replica = sentinel.slave_for(settings.sentinel_name) if settings.replica_reads else None
        return primary, replica

    if topology is Topology.URL:
        return from_url(settings.url, **options, **_tls_options(settings)), None

    if topology is Topology.SOCKET:
        return Redis(unix_socket_path=settings.socket, **options), None

    if topology is Topology.DIRECT:
        tls = _tls_options(settings)
        if tls:
            options["ssl"] = True
        return Redis(host=settings.host, port=settings.port, **options, **tls), None

    raise ValueError(f"Cannot build a client for topology {topology.value}")


def describe(settings: RedisSettings) -> str:
    """Human-readable target for log messages (no credentials)."""
    topology = settings.topology
    if topology is Topology.CLUSTER:
        return "cluster " + ",".join(f"{n.host}:{n.port}" for n in settings.cluster)
    if topology is Topology.SENTINEL:
        return f"sentinel master '{settings.sentinel_name}'"
    if topology is Topology.URL:
        # Strip userinfo from the URL
        scheme, _, rest = settings.url.partition("://")
        return f"{scheme}://{rest.rpartition('@')[2]}"
    if topology is Topology.SOCKET:
        return f"unix socket {settings.socket}"
    if topology is Topology.EXTERNAL:
        return "external client"
    return f"{settings.host}:{settings.port}"
