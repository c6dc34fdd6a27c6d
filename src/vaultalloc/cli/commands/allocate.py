"""Allocation command."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from vaultalloc.cli.ui.formatters import add_breakdown_row, create_allocation_table
from vaultalloc.services.allocation.errors import AllocationError
from vaultalloc.services.allocation.scenario import load_scenario
from vaultalloc.services.allocation.service import AllocationService
from vaultalloc.system import LoggerFactory
from vaultalloc.system.config import reload_system_config

console = Console()


@click.command("allocate")
@click.option(
    "--file",
    "-f",
    "scenario_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to allocation scenario file (YAML)",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="Path to system config (defaults to $VAULTALLOC_CONFIG or config/system.yaml)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level (DEBUG shows per-market detail)",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print results as JSON instead of a table",
)
def allocate_command(
    scenario_file: Path,
    config_file: Optional[Path],
    log_level: Optional[str],
    as_json: bool,
):
    """
    Compute allocation targets for a scenario.

    Loads the vault totals and market snapshots from the scenario file and
    prints, per market, the collateral to move and the target position.

    \b
    Examples:
        # Table output
        vaultalloc allocate --file scenarios/two_markets.yaml

        # Machine-readable output
        vaultalloc allocate -f scenarios/two_markets.yaml --json

        # Debug mode (per-market context and intermediates on stderr)
        vaultalloc allocate -f scenarios/two_markets.yaml -l debug
    """
    try:
        system_config = reload_system_config(config_file)

        if log_level:
            system_config.logging.level = log_level.upper()
        LoggerFactory.configure(system_config.logging.to_logger_config())

        scenario = load_scenario(scenario_file)
        service = AllocationService(account=scenario.account, config=system_config.allocation)
        breakdowns = service.allocate_with_breakdown(
            scenario.registrations,
            collateral=scenario.collateral,
            assets=scenario.assets,
        )
    except (AllocationError, ValueError, FileNotFoundError) as e:
        if as_json:
            click.echo(json.dumps({"error": type(e).__name__, "message": str(e)}))
        else:
            console.print(f"[bold red]✗ Allocation failed:[/bold red] {e}")
        sys.exit(1)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "account": scenario.account,
                    "collateral": str(scenario.collateral),
                    "assets": str(scenario.assets),
                    "markets": [breakdown.to_dict() for breakdown in breakdowns],
                },
                indent=2,
            )
        )
        return

    console.print(f"[cyan]Collateral:[/cyan] {scenario.collateral}")
    console.print(f"[cyan]Assets:[/cyan]     {scenario.assets}")
    console.print()

    table = create_allocation_table(scenario.account)
    for breakdown in breakdowns:
        add_breakdown_row(table, breakdown)
    console.print(table)
