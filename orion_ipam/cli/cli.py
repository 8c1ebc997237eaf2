#!/usr/bin/env python3
"""
Main CLI entry point using Typer.
"""

import sys
from pathlib import Path
from typing import Optional

import typer

from orion_ipam.cli.commands import reservation
from orion_ipam.configuration import load_conf, setup_logging
from orion_ipam.exceptions import OrionConfigurationError

app = typer.Typer(
    name="orion-ipam",
    help="SolarWinds Orion IPAM reservation tool",
    add_completion=False,
)

# Add command groups
app.add_typer(reservation.app, name="reservation", help="Reservation management commands")


@app.callback()
def configure(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None, "--config-file", help="oslo.config file (default: standard orion-ipam locations)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """
    Load configuration and logging for the selected command.
    """
    try:
        conf = load_conf(config_file)
    except OrionConfigurationError as e:
        typer.echo(f"Error loading configuration: {e}", err=True)
        raise typer.Exit(1)

    setup_logging(conf, debug=debug)
    ctx.obj = {"conf": conf}


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except KeyboardInterrupt:
        typer.echo("\nOperation cancelled by user", err=True)
        return 130
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
