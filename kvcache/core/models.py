# ==============================================================================
# Cache Domain Models
# ==============================================================================
"""
Pydantic models for cache keys and stored envelopes.

These models are used for:
- Addressing entries (segment + id) in a backing store
- Wrapping cached values with the time they were stored and their TTL
- Serializing/deserializing the persisted JSON record

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

import json
import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kvcache.core.errors import BadEnvelopeError, MalformedEnvelopeError, SerializationError


class ConnectionState(str, Enum):
    """Lifecycle states of a backend connection."""

    UNSTARTED = "unstarted"
    STARTING = "starting"
    READY = "ready"
    STOPPING = "stopping"
    STOPPED = "stopped"


class CacheKey(BaseModel):
    """
    Identifies a single cache entry.

    Attributes:
        segment: Logical grouping of entries (e.g., a cache policy name)
        id: Entry identifier within the segment
    """

    model_config = ConfigDict(frozen=True)

    segment: str = Field(..., description="Segment name")
    id: str = Field(..., description="Entry identifier")


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class Envelope(BaseModel):
    """
    The record persisted for each cache entry.

    Attributes:
        item: The cached value (any JSON-serializable value)
        stored: Epoch milliseconds when the value was written
        ttl: Intended time-to-live in milliseconds
    """

    item: Any = Field(..., description="Cached value")
    stored: int = Field(..., description="Epoch milliseconds when stored")
    ttl: int | float | None = Field(default=None, description="Time-to-live in milliseconds")

    @property
    def expires_at(self) -> float | None:
        """Epoch milliseconds after which the entry is stale, if a TTL is known."""
        if self.ttl is None:
            return None
        return self.stored + self.ttl

    def to_json(self) -> str:
        """
        Serialize the envelope for storage.

        Raises:
            SerializationError: If the item cannot be encoded as JSON
                (e.g., circular references or unsupported types)
        """
        try:
            return json.dumps({"item": self.item, "stored": self.stored, "ttl": self.ttl})
        except (TypeError, ValueError) as err:
            raise SerializationError(str(err)) from err

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Envelope":
        """
        Parse a stored record back into an envelope.

        Args:
            raw: JSON text read from the backing store

        Raises:
            BadEnvelopeError: If the text is not a JSON object
            MalformedEnvelopeError: If 'stored' or 'item' is missing
        """
        try:
            data = json.loads(raw)
        except ValueError as err:
            raise BadEnvelopeError() from err

        if not isinstance(data, dict):
            raise BadEnvelopeError()

        # 'item' may hold any value, including falsy ones
        if not data.get("stored") or "item" not in data:
            raise MalformedEnvelopeError()

        try:
            return cls(item=data["item"], stored=data["stored"], ttl=data.get("ttl"))
        except ValidationError as err:
            raise MalformedEnvelopeError() from err
