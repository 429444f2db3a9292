# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the contracts for the ports-and-adapters architecture.
"""

from kvcache.base.cache import CacheBackend

__all__ = [
    "CacheBackend",
]
