"""Inverse inertia matrix block.

Instantiates the inertia subgraph as a single block and feeds its output
through a matrix inverse::

    q ──> inertiaMatrix ──> inverse ──> out

The inverse is the host's product block with a single ``/`` input in
matrix mode; this package never computes an inverse itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dynblk.domain.blocks import NodeKind
from dynblk.domain.errors import MissingDependency
from dynblk.infrastructure.graph.passes import finalize_subgraph

if TYPE_CHECKING:
    from dynblk.infrastructure.graph.engine import Subgraph
    from dynblk.infrastructure.library import LibrarySession

logger = logging.getLogger(__name__)

INSTANCE_NAME = "inertiaMatrix"
INVERT_NAME = "inverse"


def build_inverse_subgraph(
    session: LibrarySession,
    inertia_name: str = "inertia",
    *,
    name: str = "invinertia",
    coordinate: str = "q",
    layout: dict[str, int] | None = None,
) -> Subgraph:
    """Build (or rebuild) the inverse inertia subgraph and save the library.

    Raises MissingDependency, without touching the library, when
    *inertia_name* has not been built.
    """
    if not session.has_subgraph(inertia_name):
        raise MissingDependency(name, inertia_name)

    logger.info("Generating block for the inverse robot inertia matrix")
    with session.transaction():
        session.delete_subgraph(name)
        sg = session.create_subgraph(name)

        inverse = sg.add(NodeKind.INVERT, INVERT_NAME, inputs="/", multiplication="Matrix(*)")
        instance = sg.add(NodeKind.SUBGRAPH_INSTANCE, INSTANCE_NAME, reference=inertia_name)
        q = sg.add(NodeKind.INPUT, coordinate)
        out = sg.add(NodeKind.OUTPUT, "out")

        sg.connect(q, instance)
        sg.connect(instance, inverse)
        sg.connect(inverse, out)
        logger.debug("Input, output and internal wiring of %s done", name)

        finalize_subgraph(sg, **(layout or {}))

    session.persist()
    logger.info("Inverse inertia matrix block %s complete", name)
    return sg
