"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from dynblk.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from dynblk.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="dyn.ok")
    op = Text(f"  {result.op}", style="dyn.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="dyn.key")
    if key in ("path", "directory"):
        v = Text(str(value), style="dyn.path")
    elif key in ("library", "name"):
        v = Text(str(value), style="dyn.name")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _subgraph_table(subgraphs: dict[str, dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Subgraph", style="dyn.name", no_wrap=True)
    table.add_column("Blocks", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Kinds")
    table.add_column("Corrected rows")
    for name, summary in subgraphs.items():
        kinds = ", ".join(f"{k}={v}" for k, v in summary.get("kinds", {}).items())
        corrected = ", ".join(str(i) for i in summary.get("corrected_rows", []))
        table.add_row(name, str(summary["blocks"]), str(summary["lines"]), kinds, corrected)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="dyn.error")
    op = Text(f"  {result.op}", style="dyn.op")
    console.print(label, op, Text(" — "), msg)

    # Detail identifies the failing row / subgraph, so it is always shown.
    if err and err.detail:
        for k, v in err.detail.items():
            _field(console, k, v)
    for warning in result.warnings:
        console.print(Text(f"  WARNING: {warning}", style="dyn.warning"))
    if verbose:
        _render_meta(console, result)


# ── Operation renderers ───────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("library", "path", "joints", "collapses_zero_rows", "locked"):
        if key in result.data:
            _field(console, key, result.data[key])
    console.print(_subgraph_table(result.data.get("subgraphs", {})))
    if verbose:
        _render_meta(console, result)


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    if "subgraphs" in d:
        for key in ("library", "path", "locked"):
            _field(console, key, d[key])
        console.print(_subgraph_table(d["subgraphs"]))
    else:
        _field(console, "name", d.get("name", ""))
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("ID", justify="right")
        table.add_column("Block", style="dyn.name", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Ports")
        table.add_column("Params")
        for item in d.get("items", []):
            kind = str(item["kind"])
            params = ", ".join(f"{k}={v}" for k, v in item.get("params", {}).items())
            table.add_row(
                str(item["id"]),
                item["name"],
                Text(kind, style=style_for_kind(kind)),
                item["ports"],
                params,
            )
        console.print(table)
        for line in d.get("lines", []):
            console.print(f"  {line['from']} -> {line['to']}")
    if verbose:
        _render_meta(console, result)


def _render_rows(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "directory", result.data.get("directory", ""))
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Row", justify="right")
    table.add_column("Name", style="dyn.name")
    table.add_column("Zero")
    table.add_column("Symbols")
    for item in result.data.get("items", []):
        table.add_row(
            str(item["index"]),
            item["name"],
            "yes" if item.get("zero") else "",
            " ".join(item.get("symbols", [])),
        )
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_generate,
    "show": _render_show,
    "rows": _render_rows,
}
