"""Post-build passes: terminators on dangling outputs, then block layout.

Both passes are idempotent. Terminators are only added to output ports
that have no consumer, so a second run finds nothing to do. Layout only
writes positions and never touches lines.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import networkx as nx

from dynblk.domain.blocks import NodeKind

if TYPE_CHECKING:
    from dynblk.infrastructure.graph.engine import Subgraph
    from dynblk.infrastructure.library import LibrarySession

logger = logging.getLogger(__name__)

COLUMN_SPACING = 150
ROW_SPACING = 80


def add_terminators(subgraph: Subgraph) -> int:
    """Cap every unconsumed output port with a terminator block.

    Returns the number of terminators added.
    """
    added = 0
    for node_id, port in subgraph.unconnected_outputs():
        term = subgraph.add(NodeKind.TERMINATOR, subgraph.unique_name("Terminator"))
        subgraph.connect(node_id, term, src_port=port)
        added += 1
    if added:
        logger.debug("Added %d terminator(s) to %s", added, subgraph.name)
    return added


def arrange(
    subgraph: Subgraph,
    *,
    column_spacing: int = COLUMN_SPACING,
    row_spacing: int = ROW_SPACING,
) -> None:
    """Place blocks left to right by signal flow depth."""
    g = subgraph.graph
    try:
        generations = list(nx.topological_generations(g))
    except nx.NetworkXUnfeasible:
        # Feedback loops have no flow order; fall back to a single column.
        generations = [list(g.nodes)]
    for column, generation in enumerate(generations):
        for row, node_id in enumerate(sorted(generation)):
            subgraph.set_position(node_id, (column * column_spacing, row * row_spacing))


def finalize_subgraph(
    subgraph: Subgraph,
    *,
    column_spacing: int = COLUMN_SPACING,
    row_spacing: int = ROW_SPACING,
) -> int:
    """Run the terminator pass, then the layout pass. Returns terminators added."""
    added = add_terminators(subgraph)
    arrange(subgraph, column_spacing=column_spacing, row_spacing=row_spacing)
    return added


def arrange_library(session: LibrarySession, *, spacing: int = COLUMN_SPACING) -> None:
    """Lay the library's subgraphs out on one row, in name order."""
    for column, name in enumerate(sorted(session.subgraph_names())):
        session.set_subgraph_position(name, (column * spacing, 0))
