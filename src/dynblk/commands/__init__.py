"""Subcommand modules for dynblk.

Provides register_commands() which uses deferred imports to keep
``dynblk --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from dynblk.commands.generate import generate
    from dynblk.commands.rows import rows
    from dynblk.commands.show import show

    cli.add_command(generate)
    cli.add_command(show)
    cli.add_command(rows)
