# ==============================================================================
# Cache Backend Abstract Base Class
# ==============================================================================
"""
Abstract interface that a caching façade drives a storage backend through.

The façade owns policies, segments and expiry windows. A backend only knows
how to connect, how to turn a (segment, id) key into a storage key, and how to
read, write and delete envelopes.

Implementations: RedisConnection.
"""

from abc import ABC, abstractmethod
from typing import Any

from kvcache.core.errors import CacheError
from kvcache.core.models import CacheKey, Envelope


class CacheBackend(ABC):
    """
    Generic backend contract for envelope-based caching.

    Values are wrapped in an Envelope recording when they were stored and
    their intended TTL. Freshness decisions belong to the caller.
    """

    @abstractmethod
    async def start(self) -> None:
        """
        Connect to the backing store. Calling it again once started is a no-op.

        Raises:
            ConnectionFailedError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Release the connection. Client close failures are logged, not raised."""
        ...

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether the backend holds a ready connection."""
        ...

    @abstractmethod
    def validate_segment_name(self, name: str) -> CacheError | None:
        """
        Check a segment name.

        Args:
            name: Segment name to check

        Returns:
            An error describing the problem, or None if the name is valid
        """
        ...

    @abstractmethod
    def generate_key(self, key: CacheKey) -> str:
        """
        Build the storage key for a cache key.

        Args:
            key: Cache key

        Returns:
            Storage key string

        Raises:
            InvalidKeyError: If the key cannot be encoded
        """
        ...

    @abstractmethod
    async def get(self, key: CacheKey) -> Envelope | None:
        """
        Read an envelope.

        Args:
            key: Cache key

        Returns:
            The stored envelope, or None if not found
        """
        ...

    @abstractmethod
    async def set(self, key: CacheKey, value: Any, ttl: int) -> None:
        """
        Write a value wrapped in an envelope.

        Args:
            key: Cache key
            value: Value to cache (must be JSON-serializable)
            ttl: Time-to-live in milliseconds
        """
        ...

    @abstractmethod
    async def drop(self, key: CacheKey) -> None:
        """
        Delete an entry. Deleting a missing entry is not an error.

        Args:
            key: Cache key
        """
        ...
