# ==============================================================================
# kvcache
# ==============================================================================
"""
Redis-backed envelope cache backend for caching façades.

Usage:
    from kvcache import CacheKey, RedisConnection

    connection = RedisConnection(partition="app")
    await connection.start()
    await connection.set(CacheKey(segment="users", id="42"), {"name": "Ada"}, 60_000)
"""

from kvcache.base import CacheBackend
from kvcache.core import (
    BackendError,
    BadEnvelopeError,
    CacheError,
    CacheKey,
    ConfigurationError,
    ConnectionFailedError,
    ConnectionState,
    Envelope,
    InvalidKeyError,
    InvalidSegmentNameError,
    MalformedEnvelopeError,
    NotStartedError,
    SerializationError,
)
from kvcache.infrastructure.cache import RedisConnection
from kvcache.utils.config import RedisSettings, Topology

__all__ = [
    "CacheBackend",
    "RedisConnection",
    "RedisSettings",
    "Topology",
    # Models
    "CacheKey",
    "ConnectionState",
    "Envelope",
    # Errors
    "BackendError",
    "BadEnvelopeError",
    "CacheError",
    "ConfigurationError",
    "ConnectionFailedError",
    "InvalidKeyError",
    "InvalidSegmentNameError",
    "MalformedEnvelopeError",
    "NotStartedError",
    "SerializationError",
]
