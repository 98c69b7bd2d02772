"""Subgraph — a named block diagram stored as a NetworkX multigraph.

Blocks are addressed by integer handles allocated from a per-subgraph
counter, never by constructed path strings. Lines are multigraph edges
carrying ``src_port`` / ``dst_port`` attributes, so one output port can
feed several input ports of the same block (the dimension correction
fan-out relies on this).
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from typing import Any

import networkx as nx

from dynblk.domain.blocks import Edge, Node, NodeKind, port_counts

type _Graph = nx.MultiDiGraph


class Subgraph:
    """A named, directed block diagram owned by a block library."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._graph: _Graph = nx.MultiDiGraph(name=name)
        self._next_id = 1
        self._positions: dict[int, tuple[int, int]] = {}

    def __repr__(self) -> str:
        return f"Subgraph({self.name!r}, blocks={len(self)}, lines={self.number_of_lines})"

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes())

    @property
    def graph(self) -> _Graph:
        """Read-only view of the underlying NetworkX graph."""
        return self._graph.copy(as_view=True)

    @property
    def number_of_lines(self) -> int:
        return self._graph.number_of_edges()

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def add(self, kind: NodeKind, name: str, **params: Any) -> int:
        """Add a block and return its handle.

        Raises ValueError if *name* is already used in this subgraph.
        """
        if self.find_by_name(name) is not None:
            msg = f"Block '{name}' already exists in subgraph '{self.name}'"
            raise ValueError(msg)
        inputs, outputs = port_counts(kind, params)
        node_id = self._next_id
        self._next_id += 1
        node = Node(id=node_id, name=name, kind=kind, inputs=inputs, outputs=outputs, params=params)
        self._graph.add_node(node_id, node=node)
        return node_id

    def restore(self, node: Node, position: tuple[int, int] | None = None) -> None:
        """Re-insert a persisted block, keeping its original handle."""
        if node.id in self._graph:
            msg = f"Block id {node.id} already exists in subgraph '{self.name}'"
            raise ValueError(msg)
        self._graph.add_node(node.id, node=node)
        self._next_id = max(self._next_id, node.id + 1)
        if position is not None:
            self._positions[node.id] = position

    def remove(self, node_id: int) -> None:
        """Remove a block together with every line touching it."""
        self._require(node_id)
        self._graph.remove_node(node_id)
        self._positions.pop(node_id, None)

    def node(self, node_id: int) -> Node:
        self._require(node_id)
        node: Node = self._graph.nodes[node_id]["node"]
        return node

    def nodes(self, kind: NodeKind | None = None) -> list[Node]:
        """All blocks in handle order, optionally filtered by *kind*."""
        result = [self._graph.nodes[n]["node"] for n in sorted(self._graph.nodes)]
        if kind is not None:
            result = [n for n in result if n.kind == kind]
        return result

    def find(self, kind: NodeKind, **params: Any) -> Node | None:
        """First block of *kind* whose params match all of *params*."""
        for node in self.nodes(kind):
            if all(node.params.get(k) == v for k, v in params.items()):
                return node
        return None

    def find_by_name(self, name: str) -> Node | None:
        for node in self.nodes():
            if node.name == name:
                return node
        return None

    def unique_name(self, base: str) -> str:
        """Return *base*, or *base* with the lowest free numeric suffix."""
        taken = {n.name for n in self.nodes()}
        if base not in taken:
            return base
        suffix = 1
        while f"{base}{suffix}" in taken:
            suffix += 1
        return f"{base}{suffix}"

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def connect(self, src: int, dst: int, *, src_port: int = 1, dst_port: int = 1) -> Edge:
        """Draw a line from ``src:src_port`` to ``dst:dst_port``.

        An input port accepts a single driver. Re-drawing an existing line
        returns it unchanged.
        """
        source, target = self.node(src), self.node(dst)
        if not 1 <= src_port <= source.outputs:
            msg = f"Block '{source.name}' has no output port {src_port}"
            raise ValueError(msg)
        if not 1 <= dst_port <= target.inputs:
            msg = f"Block '{target.name}' has no input port {dst_port}"
            raise ValueError(msg)

        edge = Edge(src, src_port, dst, dst_port)
        driver = self.driver(dst, dst_port)
        if driver == edge:
            return edge
        if driver is not None:
            msg = f"Input port {dst_port} of block '{target.name}' is already connected"
            raise ValueError(msg)

        self._graph.add_edge(src, dst, src_port=src_port, dst_port=dst_port)
        return edge

    def lines(self) -> list[Edge]:
        """All lines, sorted by destination then source."""
        found = [
            Edge(u, data["src_port"], v, data["dst_port"])
            for u, v, data in self._graph.edges(data=True)
        ]
        return sorted(found, key=lambda e: (e.dst, e.dst_port, e.src, e.src_port))

    def driver(self, node_id: int, port: int) -> Edge | None:
        """The line feeding input *port* of *node_id*, if any."""
        for u, _, data in self._graph.in_edges(node_id, data=True):
            if data["dst_port"] == port:
                return Edge(u, data["src_port"], node_id, port)
        return None

    def consumers(self, node_id: int, port: int | None = None) -> list[Edge]:
        """Lines leaving *node_id*, optionally only from output *port*."""
        found = [
            Edge(node_id, data["src_port"], v, data["dst_port"])
            for _, v, data in self._graph.out_edges(node_id, data=True)
            if port is None or data["src_port"] == port
        ]
        return sorted(found, key=lambda e: (e.src_port, e.dst, e.dst_port))

    def unconnected_outputs(self) -> list[tuple[int, int]]:
        """``(handle, port)`` for every output port without a consumer."""
        dangling: list[tuple[int, int]] = []
        for node in self.nodes():
            used = {e.src_port for e in self.consumers(node.id)}
            dangling.extend((node.id, p) for p in range(1, node.outputs + 1) if p not in used)
        return dangling

    def unconnected_inputs(self) -> list[tuple[int, int]]:
        """``(handle, port)`` for every input port without a driver."""
        dangling: list[tuple[int, int]] = []
        for node in self.nodes():
            used = {data["dst_port"] for _, _, data in self._graph.in_edges(node.id, data=True)}
            dangling.extend((node.id, p) for p in range(1, node.inputs + 1) if p not in used)
        return dangling

    # ------------------------------------------------------------------
    # Layout (cosmetic)
    # ------------------------------------------------------------------

    def position(self, node_id: int) -> tuple[int, int] | None:
        return self._positions.get(node_id)

    def set_position(self, node_id: int, position: tuple[int, int]) -> None:
        self._require(node_id)
        self._positions[node_id] = position

    # ------------------------------------------------------------------
    # Comparison / copying
    # ------------------------------------------------------------------

    def structure(self) -> tuple[list[tuple[str, str, str]], list[tuple[str, int, str, int]]]:
        """Name-based description of blocks and lines, for comparisons."""
        blocks = [(n.name, str(n.kind), repr(sorted(n.params.items()))) for n in self.nodes()]
        names = {n.id: n.name for n in self.nodes()}
        lines = sorted(
            (names[e.src], e.src_port, names[e.dst], e.dst_port) for e in self.lines()
        )
        return sorted(blocks), lines

    def copy(self) -> Subgraph:
        return copy.deepcopy(self)

    def _require(self, node_id: int) -> None:
        if node_id not in self._graph:
            msg = f"No block with id {node_id} in subgraph '{self.name}'"
            raise KeyError(msg)
