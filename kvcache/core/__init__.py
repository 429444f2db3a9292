# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no framework dependencies.

This module contains:
- Domain models (CacheKey, Envelope, ConnectionState)
- The cache error taxonomy

All code here is backend-agnostic and easily unit-testable.
"""

from kvcache.core.errors import (
    BackendError,
    BadEnvelopeError,
    CacheError,
    ConfigurationError,
    ConnectionFailedError,
    InvalidKeyError,
    InvalidSegmentNameError,
    MalformedEnvelopeError,
    NotStartedError,
    SerializationError,
)
from kvcache.core.models import CacheKey, ConnectionState, Envelope, now_ms

__all__ = [
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
    # Models
    "CacheKey",
    "ConnectionState",
    "Envelope",
    "now_ms",
]
