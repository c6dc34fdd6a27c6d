"""Rich table formatters for CLI output."""

from typing import Any

from rich.table import Table

from vaultalloc.services.allocation.models import AllocationBreakdown


def create_allocation_table(account: str) -> Table:
    """
    Create a Rich table for allocation results.

    Args:
        account: Vault account the allocation was computed for

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title=f"Allocation - {account}")
    table.add_column("Market", style="cyan", no_wrap=True)
    table.add_column("Weight", justify="right")
    table.add_column("Collateral Δ", justify="right")
    table.add_column("Position", justify="right", style="yellow")
    table.add_column("Min", justify="right", style="dim")
    table.add_column("Max", justify="right", style="dim")
    table.add_column("Status")
    return table


def add_breakdown_row(table: Table, breakdown: AllocationBreakdown) -> None:
    """
    Add one market's result to the allocation table.

    Withdrawals are shown in red, deposits in green.
    """
    delta = breakdown.target.collateral
    if delta.sign() < 0:
        delta_str = f"[red]{delta}[/red]"
    elif delta.sign() > 0:
        delta_str = f"[green]+{delta}[/green]"
    else:
        delta_str = str(delta)

    if breakdown.skipped_reason is None:
        status = "[green]✓ Allocated[/green]"
    else:
        status = f"[yellow]⚠ {breakdown.skipped_reason}[/yellow]"

    table.add_row(
        breakdown.market,
        str(breakdown.weight),
        delta_str,
        str(breakdown.target.position),
        str(breakdown.limits.min_position),
        str(breakdown.limits.max_position),
        status,
    )


def create_config_table(title: str, section: dict[str, Any]) -> Table:
    """
    Create a two-column table for one config section.

    Args:
        title: Section name
        section: Section values

    Returns:
        Populated Rich Table
    """
    table = Table(title=title)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in section.items():
        table.add_row(key, str(value))
    return table
