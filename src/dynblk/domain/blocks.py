"""Block kinds, port layout, and the node/edge value types.

Ports are numbered from 1, the way block ports are numbered in the
host modelling tool. Node ids are integer handles allocated by the
owning subgraph; names are for display and persistence only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any, NamedTuple


class NodeKind(StrEnum):
    """Block variants that can appear inside a subgraph."""

    INPUT = "input"
    OUTPUT = "output"
    ROW_FUNCTION = "row_function"
    CONCATENATE = "concatenate"
    DIMENSION_CORRECTION = "dimension_correction"
    INVERT = "invert"
    SUBGRAPH_INSTANCE = "subgraph_instance"
    TERMINATOR = "terminator"


class ConcatDimension(IntEnum):
    """Concatenation axis, numbered as in the host's concatenate block."""

    ROWS = 1
    COLUMNS = 2


# Fixed (inputs, outputs) per kind. Concatenating kinds take their
# input count from the ``arity`` parameter.
_FIXED_PORTS: dict[NodeKind, tuple[int, int]] = {
    NodeKind.INPUT: (0, 1),
    NodeKind.OUTPUT: (1, 0),
    NodeKind.ROW_FUNCTION: (1, 1),
    NodeKind.INVERT: (1, 1),
    NodeKind.SUBGRAPH_INSTANCE: (1, 1),
    NodeKind.TERMINATOR: (1, 0),
}

_ARITY_KINDS = frozenset({NodeKind.CONCATENATE, NodeKind.DIMENSION_CORRECTION})


def port_counts(kind: NodeKind, params: dict[str, Any]) -> tuple[int, int]:
    """Return ``(inputs, outputs)`` for a block of *kind* with *params*."""
    if kind in _ARITY_KINDS:
        arity = params.get("arity")
        if not isinstance(arity, int) or arity < 1:
            msg = f"{kind} block needs a positive integer 'arity', got {arity!r}"
            raise ValueError(msg)
        return arity, 1
    return _FIXED_PORTS[kind]


@dataclass(frozen=True)
class Node:
    """A block inside a subgraph."""

    id: int
    name: str
    kind: NodeKind
    inputs: int
    outputs: int
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def index(self) -> int | None:
        """Row index for row functions, None for other kinds."""
        value = self.params.get("index")
        return value if isinstance(value, int) else None


class Edge(NamedTuple):
    """A line from ``(src, src_port)`` to ``(dst, dst_port)``."""

    src: int
    src_port: int
    dst: int
    dst_port: int
