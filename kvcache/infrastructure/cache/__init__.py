# ==============================================================================
# Cache Infrastructure
# ==============================================================================
"""
Cache backend implementations for the ports-and-adapters architecture.

Available implementations:
- RedisConnection: Redis-backed envelope cache (direct, socket, URL,
  sentinel, cluster or externally supplied client)
"""

from kvcache.infrastructure.cache.connection import (
    RedisConnection,
    encode_key_part,
    expiry_seconds,
)

__all__ = [
    "RedisConnection",
    "encode_key_part",
    "expiry_seconds",
]
