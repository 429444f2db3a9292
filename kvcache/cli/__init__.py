# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the kvcache backend.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- status.py: Connectivity check
- entries.py: get / set / drop of cache entries
- config.py: Configuration display
"""

from kvcache.cli.config import config_show
from kvcache.cli.entries import entry_drop, entry_get, entry_set
from kvcache.cli.status import status

__all__ = [
    "config_show",
    "entry_drop",
    "entry_get",
    "entry_set",
    "status",
]
