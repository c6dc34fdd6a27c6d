"""Commands __init__ - exports all command groups."""

from vaultalloc.cli.commands.allocate import allocate_command
from vaultalloc.cli.commands.config import config_group

__all__ = ["allocate_command", "config_group"]
