"""Rich Console factory and theme for dynblk output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DYN_THEME = Theme(
    {
        "dyn.ok": "bold green",
        "dyn.error": "bold red",
        "dyn.warning": "bold yellow",
        "dyn.op": "bold cyan",
        "dyn.key": "dim",
        "dyn.name": "bold blue",
        "dyn.path": "dim",
        "dyn.kind.row_function": "green",
        "dyn.kind.dimension_correction": "yellow",
        "dyn.kind.subgraph_instance": "magenta",
        "dyn.kind.terminator": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=DYN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for a block kind ("" when unstyled)."""
    style = f"dyn.kind.{kind}"
    return style if style in DYN_THEME.styles else ""
