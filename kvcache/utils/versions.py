# ==============================================================================
# Installed Versions
# ==============================================================================
"""
Version reporting for `kvcache --version` and `kvcache status`.
"""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "kvcache-redis"

# Reported when running from a source checkout that was never installed
SOURCE_VERSION = "0.1.0"


def get_package_version(package_name: str, default: str = "unknown") -> str:
    """Installed version of a distribution, or ``default`` when it is missing."""
    try:
        return version(package_name)
    except PackageNotFoundError:
        return default


def get_kvcache_version() -> str:
    return get_package_version(DISTRIBUTION, default=SOURCE_VERSION)


def get_stack_versions() -> dict[str, str]:
    """
    Versions of this backend and the Redis client it drives.

    Returns:
        Mapping of component name ("kvcache", "redis") to version string
    """
    return {
        "kvcache": get_kvcache_version(),
        "redis": get_package_version("redis"),
    }
