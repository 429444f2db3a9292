# ==============================================================================
# kvcache Utilities
# ==============================================================================
"""
Shared utilities: configuration, retry helpers and version lookup.
"""

from kvcache.utils.config import (
    NodeAddress,
    RedisSettings,
    Settings,
    TlsOptions,
    Topology,
    get_settings,
)
from kvcache.utils.retry import CONNECT_RETRY_EXCEPTIONS, retry_light
from kvcache.utils.versions import (
    get_kvcache_version,
    get_package_version,
    get_stack_versions,
)

__all__ = [
    # Config
    "NodeAddress",
    "RedisSettings",
    "Settings",
    "TlsOptions",
    "Topology",
    "get_settings",
    # Retry
    "CONNECT_RETRY_EXCEPTIONS",
    "retry_light",
    # Versions
    "get_kvcache_version",
    "get_package_version",
    "get_stack_versions",
]
