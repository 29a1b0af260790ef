"""Subcommand modules for opdispatch.

Provides register_commands() which uses deferred imports to keep
``opdispatch --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every command on the root CLI group."""
    from opdispatch.commands.describe import services
    from opdispatch.commands.invoke import cancel, info, result, start

    cli.add_command(services)
    cli.add_command(start)
    cli.add_command(info)
    cli.add_command(result)
    cli.add_command(cancel)
