# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the kvcache CLI.
"""

import json
from typing import Annotated

import typer

from kvcache.cli.shared import C, fail, mask_secret
from kvcache.core.errors import ConfigurationError
from kvcache.infrastructure.cache import topology
from kvcache.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    try:
        settings = get_settings()
    except ConfigurationError as err:
        fail(str(err))
    redis = settings.redis

    if json_output:
        config = {
            "topology": redis.topology.value,
            "redis": redis.model_dump(mode="json"),
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()
    print(f"{C.CYAN}Redis{C.RESET}")
    print(f"  Topology:   {C.WHITE}{redis.topology.value}{C.RESET}")
    print(f"  Target:     {C.WHITE}{topology.describe(redis)}{C.RESET}")
    database = redis.database_index
    print(f"  Database:   {C.WHITE}{database if database is not None else 0}{C.RESET}")
    print(f"  Partition:  {C.WHITE}{redis.partition or '(none)'}{C.RESET}")
    print(f"  Password:   {C.WHITE}{mask_secret(redis.password)}{C.RESET}")
    print(f"  TLS:        {C.WHITE}{'enabled' if redis.tls_options else 'disabled'}{C.RESET}")
    print()
    print(f"{C.CYAN}Client{C.RESET}")
    print(f"  Timeout:    {C.WHITE}{redis.socket_timeout}s{C.RESET}")
    print(f"  Retries:    {C.WHITE}{redis.retries}{C.RESET}")
    print()
    print(f"  Log level:  {C.WHITE}{settings.log_level}{C.RESET}")
    print()
