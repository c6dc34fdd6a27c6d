"""VaultAlloc CLI main entry point."""

import click

from vaultalloc import __version__
from vaultalloc.cli.commands import allocate_command, config_group


@click.group()
@click.version_option(version=__version__)
def main():
    """VaultAlloc - Multi-market vault allocation"""
    pass


# Register commands
main.add_command(allocate_command)
main.add_command(config_group)


if __name__ == "__main__":
    main()
