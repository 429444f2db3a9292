# ==============================================================================
# Status Command
# ==============================================================================
"""
Status command for the kvcache CLI.

Connects with the configured settings and reports whether the backend
reaches READY, in either formatted or JSON output.

Includes light retry logic (3 attempts, ~7 seconds) for network resilience
when connecting.
"""

import asyncio
import json as json_module
import logging
from typing import Annotated, Any

import typer

from kvcache.cli.shared import C, I, fail, get_connection
from kvcache.core.errors import CacheError, ConfigurationError
from kvcache.infrastructure.cache import RedisConnection, topology
from kvcache.utils.retry import CONNECT_RETRY_EXCEPTIONS, retry_light
from kvcache.utils.versions import get_stack_versions

logger = logging.getLogger(__name__)


# ==============================================================================
# Data Collection
# ==============================================================================


@retry_light(CONNECT_RETRY_EXCEPTIONS, logger)
async def _start_with_retry(connection: RedisConnection) -> None:
    """Start the backend, retrying connection failures."""
    await connection.start()


async def _collect_status(connection: RedisConnection) -> dict[str, Any]:
    """Collect backend status data."""
    settings = connection.settings
    data: dict[str, Any] = {
        "topology": settings.topology.value,
        "target": topology.describe(settings),
        "partition": settings.partition,
        "ready": False,
        "error": None,
    }
    try:
        await _start_with_retry(connection)
    except CacheError as err:
        data["error"] = str(err)
        return data

    try:
        data["ready"] = connection.is_ready()
    finally:
        await connection.stop()
    return data


# ==============================================================================
# Command
# ==============================================================================


def status(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Check connectivity to the configured Redis backend.

    Exits with status 1 when the backend cannot be reached.

    Examples:
        kvcache status
        kvcache status --json
    """
    try:
        connection = get_connection()
    except ConfigurationError as err:
        fail(str(err))

    data = asyncio.run(_collect_status(connection))
    data["versions"] = get_stack_versions()

    if json_output:
        print(json_module.dumps(data, indent=2))
    else:
        print()
        print(f"{C.BOLD}Cache Backend{C.RESET}")
        print(f"  Topology:   {C.WHITE}{data['topology']}{C.RESET}")
        print(f"  Target:     {C.WHITE}{data['target']}{C.RESET}")
        print(f"  Partition:  {C.WHITE}{data['partition'] or '(none)'}{C.RESET}")
        if data["ready"]:
            print(f"  Status:     {C.BRIGHT_GREEN}{I.CHECK} ready{C.RESET}")
        else:
            print(f"  Status:     {C.BRIGHT_RED}{I.CROSS} unreachable{C.RESET}")
            print(f"  {C.DIM}{data['error']}{C.RESET}")
        print(
            f"  {C.DIM}kvcache {data['versions']['kvcache']}, "
            f"redis-py {data['versions']['redis']}{C.RESET}"
        )
        print()

    if not data["ready"]:
        raise typer.Exit(code=1)
