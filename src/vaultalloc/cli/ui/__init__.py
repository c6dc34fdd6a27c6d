"""CLI UI components - formatters."""

from vaultalloc.cli.ui.formatters import add_breakdown_row, create_allocation_table, create_config_table

__all__ = [
    "add_breakdown_row",
    "create_allocation_table",
    "create_config_table",
]
