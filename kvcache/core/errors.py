# ==============================================================================
# Cache Error Taxonomy
# ==============================================================================
"""
Exceptions raised by cache backends.

Every failure a backend reports is one of the classes below, so callers can
depend on a small, stable set of error types instead of the exceptions of
whatever client library sits underneath.
"""


class CacheError(Exception):
    """Base class for all cache backend errors."""


class NotStartedError(CacheError):
    """An operation was attempted before start() or after stop()."""

    def __init__(self, message: str = "Connection not started"):
        super().__init__(message)


class ConfigurationError(CacheError):
    """Connection settings are conflicting or incomplete."""


class ConnectionFailedError(CacheError):
    """The backing store could not be reached or authenticated before readiness."""


class InvalidKeyError(CacheError):
    """A cache key cannot be encoded into a storage key."""


class InvalidSegmentNameError(InvalidKeyError):
    """A segment name is empty or contains a NUL character."""


class BadEnvelopeError(CacheError):
    """A stored value is not parseable as an envelope object."""

    def __init__(self, message: str = "Bad envelope content"):
        super().__init__(message)


class MalformedEnvelopeError(CacheError):
    """A stored envelope is missing its 'stored' or 'item' field."""

    def __init__(self, message: str = "Incorrect envelope structure"):
        super().__init__(message)


class SerializationError(CacheError):
    """A value could not be serialized for storage."""


class BackendError(CacheError):
    """The backing store reported an error during an operation."""
