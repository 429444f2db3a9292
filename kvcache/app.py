# ==============================================================================
# kvcache CLI
# ==============================================================================
"""
Command-line interface for the Redis envelope cache backend.

Usage:
    kvcache --help
    kvcache --version
    kvcache status
    kvcache config show
    kvcache set users 42 '{"name": "Ada"}' --ttl 30000
    kvcache get users 42
    kvcache drop users 42
"""

import logging
from typing import Annotated

import typer

from kvcache.core.errors import ConfigurationError
from kvcache.utils.config import get_settings
from kvcache.utils.versions import get_kvcache_version

# ==============================================================================
# App Configuration
# ==============================================================================

app = typer.Typer(
    name="kvcache",
    help="Redis envelope cache backend CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        print(f"kvcache {get_kvcache_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version", help="Show version and exit", callback=_version_callback, is_eager=True
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Redis envelope cache backend CLI."""
    try:
        level = get_settings().log_level
    except ConfigurationError:
        # Reported by the command itself
        level = "WARNING"
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Entry commands are imported from kvcache.cli.entries
from kvcache.cli.entries import entry_drop, entry_get, entry_set

app.command("get")(entry_get)
app.command("set")(entry_set)
app.command("drop")(entry_drop)

# Status command is imported from kvcache.cli.status
from kvcache.cli.status import status

app.command("status")(status)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from kvcache.cli.config module
from kvcache.cli.config import config_show

config_app.command("show")(config_show)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
