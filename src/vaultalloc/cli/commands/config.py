"""Configuration inspection commands."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from vaultalloc.cli.ui.formatters import create_config_table
from vaultalloc.system.config import reload_system_config

console = Console()


@click.group("config")
def config_group():
    """Inspect system configuration."""
    pass


@config_group.command("show")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="Path to system config (defaults to $VAULTALLOC_CONFIG or config/system.yaml)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the merged config as JSON")
def show_command(config_file: Optional[Path], as_json: bool):
    """
    Show the effective system configuration.

    Prints defaults merged with the config file and environment variables.
    """
    try:
        config = reload_system_config(config_file)
    except ValueError as e:
        console.print(f"[bold red]✗ Invalid config:[/bold red] {e}")
        sys.exit(1)

    data = config.to_dict()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    for section, values in data.items():
        console.print(create_config_table(section, values))
