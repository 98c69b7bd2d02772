"""Command: inspect a generated block library."""

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
  dynblk show
  dynblk show inertia
  dynblk show invinertia --library out/robotslib.blklib""",
)
@click.argument("subgraph", required=False)
@click.option(
    "--library",
    "library_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Block library file (default: from config).",
)
@click.pass_obj
def show(app: AppContext, subgraph: str | None, library_path: Path | None) -> None:
    """Show the library's subgraphs, or the blocks and lines of one SUBGRAPH."""
    from dynblk.services.library import LibraryService

    app.emit(LibraryService(app.settings, app.manager).show(subgraph, library_path=library_path))
