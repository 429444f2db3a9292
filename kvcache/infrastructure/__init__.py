# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

This module contains concrete implementations of the base contracts:
- cache/ - Cache backend adapters (Redis)
"""

from kvcache.infrastructure.cache import RedisConnection

__all__ = [
    # Cache
    "RedisConnection",
]
