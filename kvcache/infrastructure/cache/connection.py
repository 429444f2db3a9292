# ==============================================================================
# Redis Cache Backend
# ==============================================================================
"""
Redis implementation of the CacheBackend interface.

Provides:
- Idempotent start/stop over any supported topology (direct, unix socket,
  URL, sentinel, cluster) or an externally owned client
- Deterministic storage keys: [partition:]segment:id, percent-encoded
- Envelope storage with a native key expiry (whole seconds, minimum 1)

Errors from redis-py are translated into the kvcache error taxonomy.
"""

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

from redis.exceptions import RedisClusterException, RedisError

from kvcache.base import CacheBackend
from kvcache.core.errors import (
    BackendError,
    CacheError,
    ConnectionFailedError,
    InvalidKeyError,
    InvalidSegmentNameError,
    NotStartedError,
    SerializationError,
)
from kvcache.core.models import CacheKey, ConnectionState, Envelope, now_ms
from kvcache.infrastructure.cache import topology
from kvcache.utils.config import RedisSettings

logger = logging.getLogger(__name__)

# Characters left unescaped in key parts (same set as JavaScript encodeURIComponent)
KEY_SAFE_CHARS = "-_.!~*'()"

ErrorListener = Callable[[Exception], None]

# RedisClusterException does not derive from RedisError
CLIENT_ERRORS = (RedisError, RedisClusterException)
CONNECT_ERRORS = CLIENT_ERRORS + (OSError,)


def encode_key_part(part: str) -> str:
    """Percent-encode one component of a storage key."""
    return quote(part, safe=KEY_SAFE_CHARS)


def expiry_seconds(ttl: float) -> int:
    """
    Convert a TTL in milliseconds to a key expiry in whole seconds.

    Sub-second and non-positive TTLs round up to 1 second, since an expiry of
    0 is rejected by Redis.
    """
    return max(1, math.floor(ttl / 1000))


class RedisConnection(CacheBackend):
    """
    Redis implementation of the CacheBackend interface.

    Holds at most one primary client (and, with sentinel replica reads, one
    read-only replica client). A client passed in via settings is adopted,
    never closed.

    Example:
        connection = RedisConnection(partition="app", host="127.0.0.1")
        await connection.start()
        await connection.set(CacheKey(segment="users", id="42"), {"name": "Ada"}, 60_000)
        envelope = await connection.get(CacheKey(segment="users", id="42"))
        await connection.stop()
    """

    def __init__(self, settings: RedisSettings | None = None, **options: Any):
        """
        Initialize the backend. No I/O happens until start().

        Args:
            settings: Validated connection settings
            **options: Used to build settings when none are given
                (see RedisSettings for the recognized options)

        Raises:
            ConfigurationError: If the options are conflicting or incomplete
        """
        if settings is None:
            settings = RedisSettings.from_options(**options)
        elif options:
            raise TypeError("Pass either settings or keyword options, not both")

        self._settings = settings
        self._client = None
        self._replica = None
        self._owned = False
        self._state = ConnectionState.UNSTARTED
        self._starting: asyncio.Task | None = None
        self._error_listeners: list[ErrorListener] = []

    @property
    def settings(self) -> RedisSettings:
        """Connection settings."""
        return self._settings

    @property
    def state(self) -> ConnectionState:
        """Current lifecycle state."""
        return self._state

    @property
    def client(self):
        """The underlying redis-py client, or None when not started."""
        return self._client

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def start(self) -> None:
        """
        Connect to Redis, or adopt the externally supplied client.

        Concurrent callers share one connection attempt and all observe its
        outcome.

        Raises:
            ConnectionFailedError: If Redis cannot be reached or authenticated
        """
        if self._client is not None:
            return

        if self._settings.client is not None:
            self._client = self._settings.client
            self._owned = False
            self._state = ConnectionState.READY
            logger.debug("Adopted external Redis client")
            return

        if self._starting is None or self._starting.done():
            self._starting = asyncio.create_task(self._connect())

        starting = self._starting
        try:
            await asyncio.shield(starting)
        finally:
            if self._starting is starting and starting.done():
                self._starting = None

    async def _connect(self) -> None:
        self._state = ConnectionState.STARTING
        target = topology.describe(self._settings)
        primary = replica = None

        try:
            primary, replica = topology.build_clients(self._settings)
            await primary.ping()
            if replica is not None:
                await replica.ping()
        except BaseException as err:
            # Every failure before readiness returns to UNSTARTED
            self._state = ConnectionState.UNSTARTED
            await self._close_quietly(replica, primary)
            if not isinstance(err, CONNECT_ERRORS):
                raise
            logger.warning("Failed to connect to Redis at %s: %s", target, err)
            raise ConnectionFailedError(f"Failed to connect to Redis at {target}: {err}") from err

        self._client = primary
        self._replica = replica
        self._owned = True
        self._state = ConnectionState.READY
        logger.info("Connected to Redis at %s", target)

    async def stop(self) -> None:
        """
        Release the connection.

        An adopted client is only detached. An owned client is closed; the
        local references are cleared even if closing fails.
        """
        client, replica = self._client, self._replica
        if client is None:
            if self._state is not ConnectionState.STARTING:
                self._state = ConnectionState.STOPPED
            return

        self._state = ConnectionState.STOPPING
        try:
            if self._owned:
                self._error_listeners.clear()
                await self._close_quietly(replica, client)
                logger.info("Disconnected from Redis")
        finally:
            self._client = None
            self._replica = None
            self._owned = False
            self._state = ConnectionState.STOPPED

    @staticmethod
    async def _close_quietly(*clients) -> None:
        for handle in clients:
            if handle is None:
                continue
            try:
                await handle.aclose()
            except CONNECT_ERRORS as err:
                logger.warning("Error closing Redis client: %s", err)

    def is_ready(self) -> bool:
        """
        Whether a client is held and the connection reached READY.

        Readiness is tracked by this backend, not polled from the client:
        redis-py clients expose no connection status, so an adopted client
        closed by its owner still reports ready until stop().
        """
        return self._client is not None and self._state is ConnectionState.READY

    # ==========================================================================
    # Error notifications
    # ==========================================================================

    def add_error_listener(self, listener: ErrorListener) -> None:
        """
        Subscribe to backend errors observed on a ready connection.

        Listeners are informational: errors never change the connection state.
        """
        self._error_listeners.append(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        """Unsubscribe a listener added with add_error_listener()."""
        if listener in self._error_listeners:
            self._error_listeners.remove(listener)

    def _backend_error(self, operation: str, storage_key: str, err: Exception) -> BackendError:
        logger.warning("Redis %s failed for key %s: %s", operation.upper(), storage_key, err)
        for listener in list(self._error_listeners):
            try:
                listener(err)
            except Exception:
                logger.exception("Error listener raised")
        return BackendError(str(err))

    # ==========================================================================
    # Keys
    # ==========================================================================

    def validate_segment_name(self, name: str) -> CacheError | None:
        """
        Check a segment name.

        Returns:
            InvalidSegmentNameError for an empty name or a name with a NUL
            character, otherwise None
        """
        if not name:
            return InvalidSegmentNameError("Empty string")
        if "\0" in name:
            return InvalidSegmentNameError("Includes null character")
        return None

    def generate_key(self, key: CacheKey) -> str:
        """
        Build the storage key ``[partition:]segment:id``.

        Raises:
            InvalidKeyError: If the key lacks a usable segment or id
        """
        try:
            segment, id_ = key.segment, key.id
        except AttributeError as err:
            raise InvalidKeyError(f"Invalid cache key: {key!r}") from err

        if not isinstance(segment, str) or not isinstance(id_, str):
            raise InvalidKeyError(f"Invalid cache key: {key!r}")
        error = self.validate_segment_name(segment)
        if error is not None:
            raise error
        if not id_:
            raise InvalidKeyError("Empty id")

        parts = []
        if self._settings.partition:
            parts.append(encode_key_part(self._settings.partition))
        parts.append(encode_key_part(segment))
        parts.append(encode_key_part(id_))
        return ":".join(parts)

    # ==========================================================================
    # Operations
    # ==========================================================================

    def _require_client(self):
        if self._client is None:
            raise NotStartedError()
        return self._client

    async def get(self, key: CacheKey) -> Envelope | None:
        """
        Read an envelope.

        Returns:
            The stored envelope, or None if not found

        Raises:
            NotStartedError: If not started
            BadEnvelopeError: If the stored value is not a JSON object
            MalformedEnvelopeError: If the envelope lacks 'stored' or 'item'
            BackendError: If Redis reports an error
        """
        client = self._require_client()
        reader = self._replica if self._replica is not None else client
        storage_key = self.generate_key(key)

        try:
            result = await reader.get(storage_key)
        except CLIENT_ERRORS as err:
            raise self._backend_error("get", storage_key, err) from err

        if not result:
            logger.debug("Cache miss for %s", storage_key)
            return None
        return Envelope.from_json(result)

    async def set(self, key: CacheKey, value: Any, ttl: int) -> None:
        """
        Write a value wrapped in an envelope, expiring with the TTL.

        Raises:
            NotStartedError: If not started
            SerializationError: If the value cannot be encoded or the TTL is
                not a finite number of milliseconds (nothing is written)
            BackendError: If Redis reports an error
        """
        client = self._require_client()
        storage_key = self.generate_key(key)
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or not math.isfinite(ttl):
            raise SerializationError(f"ttl must be a finite number of milliseconds, got {ttl!r}")
        payload = Envelope(item=value, stored=now_ms(), ttl=ttl).to_json()

        try:
            # SET with EX is atomic, so no record is left without an expiry
            await client.set(storage_key, payload, ex=expiry_seconds(ttl))
        except CLIENT_ERRORS as err:
            raise self._backend_error("set", storage_key, err) from err
        logger.debug("Stored %s (ttl=%sms)", storage_key, ttl)

    async def drop(self, key: CacheKey) -> None:
        """
        Delete an entry. Deleting a missing entry is not an error.

        Raises:
            NotStartedError: If not started
            BackendError: If Redis reports an error
        """
        client = self._require_client()
        storage_key = self.generate_key(key)

        try:
            await client.delete(storage_key)
        except CLIENT_ERRORS as err:
            raise self._backend_error("drop", storage_key, err) from err
