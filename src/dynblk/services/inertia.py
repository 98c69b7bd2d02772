"""Inertia matrix block — one function block per row, stacked into N x N.

Layout of the generated subgraph::

    q ──┬─> inertia_row_1 ──────────────────> inertia:1 ─┐
        ├─> inertia_row_2 ──> DimCorrection2 ─> inertia:2 ├─> out
        └─> inertia_row_N ──────────────────> inertia:N ─┘

``inertia`` concatenates along rows, so row k of the matrix is whatever
arrives on input port k. ``DimCorrection<k>`` only appears for all-zero
rows when the host collapses such rows to a scalar.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import sympy

from dynblk.domain.blocks import ConcatDimension, NodeKind
from dynblk.infrastructure.graph.passes import finalize_subgraph
from dynblk.services.telemetry import trace_span

if TYPE_CHECKING:
    from dynblk.domain.capabilities import Capabilities
    from dynblk.domain.expressions import RowExpression
    from dynblk.infrastructure.graph.engine import Subgraph
    from dynblk.infrastructure.library import LibrarySession
    from dynblk.infrastructure.symbols import RowLookup

logger = logging.getLogger(__name__)

INPUT_NAME = "q"
OUTPUT_NAME = "out"
CONCAT_NAME = "inertia"


def build_inertia_subgraph(
    session: LibrarySession,
    joints: int,
    row_lookup: RowLookup,
    capabilities: Capabilities,
    *,
    name: str = "inertia",
    coordinate: str = INPUT_NAME,
    layout: dict[str, int] | None = None,
) -> Subgraph:
    """Build (or rebuild) the inertia matrix subgraph and save the library.

    Any existing subgraph called *name* is replaced. If a row lookup
    fails, the library is left exactly as it was before the call.

    Args:
        session: Unlocked library session to build into.
        joints: Number of joints N (rows and columns of the matrix).
        row_lookup: Resolves row k (1-based) to its expression; raises
            RowExpressionMissing when the row was never derived.
        capabilities: Host capability flags for this run.
        name: Subgraph name.
        coordinate: Name of the generalized coordinate input block.
        layout: Optional ``column_spacing`` / ``row_spacing`` overrides.
    """
    if joints < 1:
        msg = f"joints must be >= 1, got {joints}"
        raise ValueError(msg)

    logger.info("Generating block for the robot inertia matrix (%d joints)", joints)
    with session.transaction():
        session.delete_subgraph(name)
        sg = session.create_subgraph(name)

        q = sg.add(NodeKind.INPUT, coordinate)
        out = sg.add(NodeKind.OUTPUT, OUTPUT_NAME)
        concat = sg.add(
            NodeKind.CONCATENATE,
            CONCAT_NAME,
            dimension=int(ConcatDimension.ROWS),
            arity=joints,
        )
        sg.connect(concat, out)
        logger.debug("Enclosing subgraph %s done", name)

        for k in range(1, joints + 1):
            with trace_span(f"row_{k}"):
                _add_row(sg, k, row_lookup(k), q, concat, joints, capabilities)

        finalize_subgraph(sg, **(layout or {}))

    session.persist()
    logger.info("Inertia matrix block %s complete", name)
    return sg


def _add_row(
    sg: Subgraph,
    k: int,
    row: RowExpression,
    q: int,
    concat: int,
    joints: int,
    capabilities: Capabilities,
) -> None:
    """Add the function block for row *k* and wire it between *q* and *concat*."""
    stale = sg.find(NodeKind.ROW_FUNCTION, index=k)
    if stale is not None:
        sg.remove(stale.id)

    logger.debug("Row %d: block creation", k)
    fn = sg.add(
        NodeKind.ROW_FUNCTION,
        row.name,
        index=k,
        expression=sympy.srepr(row.expr),
        shape=list(row.expr.shape),
        variables=[sg.node(q).name],
    )

    logger.debug("Row %d: output wiring", k)
    if capabilities.collapses_zero_rows and row.is_zero_row(joints):
        _correct_degenerate_row(sg, fn, k, concat, joints)
    else:
        sg.connect(fn, concat, dst_port=k)

    logger.debug("Row %d: input wiring", k)
    sg.connect(q, fn)
    logger.debug("Row %d complete", k)


def _correct_degenerate_row(sg: Subgraph, fn: int, k: int, concat: int, joints: int) -> int:
    """Rebuild a 1xN zero row from the scalar zero an affected host emits.

    The scalar output of *fn* is fanned out into every input of a
    column-wise concatenation with N inputs, whose output then takes the
    row's place on *concat*. Returns the correction block's handle.

    Remove this function (and its call) once hosts older than the fixed
    release are no longer supported.
    """
    fix = sg.add(
        NodeKind.DIMENSION_CORRECTION,
        f"DimCorrection{k}",
        dimension=int(ConcatDimension.COLUMNS),
        arity=joints,
    )
    for port in range(1, joints + 1):
        sg.connect(fn, fix, dst_port=port)
    sg.connect(fix, concat, dst_port=k)
    logger.debug("Row %d: zero row routed through DimCorrection%d", k, k)
    return fix
