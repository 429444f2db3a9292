# ==============================================================================
# Entry Commands
# ==============================================================================
"""
Commands for reading, writing and deleting cache entries.

Each command connects with the configured settings, performs one operation
and disconnects.
"""

import asyncio
import json
from datetime import datetime
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from kvcache.cli.shared import C, I, connected, fail, get_connection, parse_value
from kvcache.core.errors import CacheError
from kvcache.core.models import CacheKey, Envelope

SegmentArg = Annotated[str, typer.Argument(help="Segment name", metavar="SEGMENT")]
IdArg = Annotated[str, typer.Argument(help="Entry identifier", metavar="ID")]


def _format_ms(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp / 1000.0).strftime("%Y-%m-%d %H:%M:%S")


# ==============================================================================
# Operations
# ==============================================================================


async def _get(key: CacheKey) -> Envelope | None:
    async with connected(get_connection()) as connection:
        return await connection.get(key)


async def _set(key: CacheKey, value: Any, ttl: int) -> str:
    async with connected(get_connection()) as connection:
        await connection.set(key, value, ttl)
        return connection.generate_key(key)


async def _drop(key: CacheKey) -> str:
    async with connected(get_connection()) as connection:
        await connection.drop(key)
        return connection.generate_key(key)


# ==============================================================================
# Commands
# ==============================================================================


def entry_get(
    segment: SegmentArg,
    entry_id: IdArg,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Read a cached entry and show its envelope.

    Exits with status 1 when the entry does not exist.

    Examples:
        kvcache get users 42
        kvcache get users 42 --json
    """
    key = CacheKey(segment=segment, id=entry_id)
    try:
        envelope = asyncio.run(_get(key))
    except CacheError as err:
        fail(str(err))

    if envelope is None:
        if json_output:
            print(json.dumps({"error": "Not found", "segment": segment, "id": entry_id}))
        else:
            print(f"{C.BRIGHT_YELLOW}{I.WARN} Not found: {segment}/{entry_id}{C.RESET}")
        raise typer.Exit(code=1)

    if json_output:
        print(envelope.model_dump_json())
        return

    table = Table(title=f"{segment}/{entry_id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Item", json.dumps(envelope.item))
    table.add_row("Stored", _format_ms(envelope.stored))
    table.add_row("TTL", f"{envelope.ttl} ms" if envelope.ttl is not None else "-")
    if envelope.expires_at is not None:
        table.add_row("Expires", _format_ms(envelope.expires_at))
    Console().print(table)


def entry_set(
    segment: SegmentArg,
    entry_id: IdArg,
    value: Annotated[str, typer.Argument(help="Value (parsed as JSON when possible)")],
    ttl: Annotated[int, typer.Option("--ttl", "-t", help="Time-to-live in milliseconds")] = 60000,
    as_string: Annotated[
        bool, typer.Option("--string", "-s", help="Store VALUE as a string, skip JSON parsing")
    ] = False,
) -> None:
    """Store a value under SEGMENT/ID.

    Examples:
        kvcache set users 42 '{"name": "Ada"}' --ttl 30000
        kvcache set users 42 123 --string
    """
    key = CacheKey(segment=segment, id=entry_id)
    try:
        storage_key = asyncio.run(_set(key, parse_value(value, as_string), ttl))
    except CacheError as err:
        fail(str(err))
    print(f"{C.BRIGHT_GREEN}{I.CHECK} Stored {storage_key} (ttl {ttl} ms){C.RESET}")


def entry_drop(
    segment: SegmentArg,
    entry_id: IdArg,
) -> None:
    """Delete the entry stored under SEGMENT/ID.

    Deleting a missing entry succeeds.
    """
    key = CacheKey(segment=segment, id=entry_id)
    try:
        storage_key = asyncio.run(_drop(key))
    except CacheError as err:
        fail(str(err))
    print(f"{C.BRIGHT_GREEN}{I.CHECK} Dropped {storage_key}{C.RESET}")
