"""Command: check the saved row expressions."""

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
  dynblk rows --joints 3
  dynblk rows --symbols derived/""",
)
@click.option("-n", "--joints", type=click.IntRange(min=1), default=None, help="Joint count.")
@click.option(
    "--symbols",
    "symbols_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory of saved row expressions.",
)
@click.pass_obj
def rows(app: AppContext, joints: int | None, symbols_path: Path | None) -> None:
    """List which inertia row expressions are saved and readable."""
    from dynblk.services.rows import RowsService

    app.emit(RowsService(app.settings, app.manager).check(joints=joints, symbols_path=symbols_path))
