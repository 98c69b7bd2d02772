"""Command: regenerate the inertia and inverse inertia blocks."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dynblk.commands._base import BlkCommand

if TYPE_CHECKING:
    from dynblk.commands._context import AppContext


@click.command(
    cls=BlkCommand,
    examples="""\
  dynblk generate --joints 3
  dynblk generate --joints 6 --symbols derived/ --library out/robotslib.blklib
  dynblk generate --joints 2 --quirk
  dynblk --json generate""",
)
@click.option("-n", "--joints", type=click.IntRange(min=1), default=None, help="Joint count.")
@click.option(
    "--library",
    "library_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Block library file (default: from config).",
)
@click.option(
    "--symbols",
    "symbols_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory of saved row expressions.",
)
@click.option(
    "--quirk/--no-quirk",
    "zero_row_quirk",
    default=None,
    help="Force the zero-row width correction on or off.",
)
@click.pass_obj
def generate(
    app: AppContext,
    joints: int | None,
    library_path: Path | None,
    symbols_path: Path | None,
    zero_row_quirk: bool | None,
) -> None:
    """Regenerate the inertia matrix blocks in the block library."""
    from dynblk.services.generate import GenerateService

    app.emit(
        GenerateService(app.settings, app.manager).generate(
            joints=joints,
            library_path=library_path,
            symbols_path=symbols_path,
            zero_row_quirk=zero_row_quirk,
        )
    )
