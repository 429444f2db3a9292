# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared utilities, constants, and helper functions used across CLI command modules.

This module provides:
- ANSI color codes and status icons
- Backend construction from settings
- A connection context manager that always stops the backend
- Error reporting helpers
"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, NoReturn

import typer

from kvcache.infrastructure.cache import RedisConnection
from kvcache.utils.config import get_settings

# ==============================================================================
# ANSI Colors and Icons
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    BULLET = "•"


# Module-level aliases for convenience
C, I = Colors, Icons

__all__ = [
    # Classes
    "Colors",
    "Icons",
    # Aliases
    "C",
    "I",
    # Backend helpers
    "connected",
    "get_connection",
    # Output helpers
    "fail",
    "mask_secret",
    "parse_value",
]


# ==============================================================================
# Backend Helpers
# ==============================================================================


def get_connection() -> RedisConnection:
    """Create a backend from the configured settings."""
    return RedisConnection(get_settings().redis)


@asynccontextmanager
async def connected(connection: RedisConnection) -> AsyncIterator[RedisConnection]:
    """Start a backend for the duration of a block, stopping it afterwards."""
    await connection.start()
    try:
        yield connection
    finally:
        await connection.stop()


# ==============================================================================
# Output Helpers
# ==============================================================================


def fail(message: str) -> NoReturn:
    """Print an error line and exit with status 1."""
    print(f"{C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}")
    raise typer.Exit(code=1)


def mask_secret(value: str | None) -> str:
    """Mask a secret for human-readable output."""
    if not value:
        return "(not set)"
    return "********"


def parse_value(raw: str, as_string: bool = False) -> Any:
    """Interpret a command-line value as JSON, falling back to the raw string.

    Args:
        raw: Value as typed on the command line
        as_string: Skip JSON parsing and keep the raw string

    Returns:
        Parsed JSON value, or the raw string
    """
    if as_string:
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw
