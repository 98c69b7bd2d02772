"""Tests for the terminator and layout passes."""

from dynblk.domain.blocks import NodeKind
from dynblk.infrastructure.graph.engine import Subgraph
from dynblk.infrastructure.graph.passes import (
    COLUMN_SPACING,
    ROW_SPACING,
    add_terminators,
    arrange,
    finalize_subgraph,
)


class TestAddTerminators:
    def test_caps_dangling_outputs(self) -> None:
        sg = Subgraph("s")
        q = sg.add(NodeKind.INPUT, "q")
        f = sg.add(NodeKind.ROW_FUNCTION, "f", index=1)
        sg.connect(q, f)

        assert add_terminators(sg) == 1
        term = sg.find_by_name("Terminator")
        assert term is not None
        assert term.kind == NodeKind.TERMINATOR
        assert sg.driver(term.id, 1).src == f  # type: ignore[union-attr]
        assert sg.unconnected_outputs() == []

    def test_numbered_names(self) -> None:
        sg = Subgraph("s")
        sg.add(NodeKind.INPUT, "a")
        sg.add(NodeKind.INPUT, "b")
        assert add_terminators(sg) == 2
        names = sorted(n.name for n in sg.nodes(NodeKind.TERMINATOR))
        assert names == ["Terminator", "Terminator1"]

    def test_idempotent(self) -> None:
        sg = Subgraph("s")
        sg.add(NodeKind.INPUT, "q")
        add_terminators(sg)
        before = sg.structure()
        assert add_terminators(sg) == 0
        assert sg.structure() == before

    def test_fully_connected_graph_untouched(self) -> None:
        sg = Subgraph("s")
        q = sg.add(NodeKind.INPUT, "q")
        out = sg.add(NodeKind.OUTPUT, "out")
        sg.connect(q, out)
        assert add_terminators(sg) == 0
        assert len(sg) == 2


class TestArrange:
    def test_columns_follow_signal_flow(self) -> None:
        sg = Subgraph("s")
        q = sg.add(NodeKind.INPUT, "q")
        f = sg.add(NodeKind.ROW_FUNCTION, "f", index=1)
        out = sg.add(NodeKind.OUTPUT, "out")
        sg.connect(q, f)
        sg.connect(f, out)

        arrange(sg)

        assert sg.position(q) == (0, 0)
        assert sg.position(f) == (COLUMN_SPACING, 0)
        assert sg.position(out) == (2 * COLUMN_SPACING, 0)

    def test_parallel_blocks_stack(self) -> None:
        sg = Subgraph("s")
        q = sg.add(NodeKind.INPUT, "q")
        a = sg.add(NodeKind.ROW_FUNCTION, "a", index=1)
        b = sg.add(NodeKind.ROW_FUNCTION, "b", index=2)
        sg.connect(q, a)
        sg.connect(q, b)

        arrange(sg, column_spacing=100, row_spacing=50)

        assert sg.position(a) == (100, 0)
        assert sg.position(b) == (100, 50)

    def test_layout_keeps_lines(self) -> None:
        sg = Subgraph("s")
        q = sg.add(NodeKind.INPUT, "q")
        out = sg.add(NodeKind.OUTPUT, "out")
        sg.connect(q, out)
        before = sg.structure()
        arrange(sg)
        assert sg.structure() == before


class TestFinalize:
    def test_terminates_then_places(self) -> None:
        sg = Subgraph("s")
        q = sg.add(NodeKind.INPUT, "q")
        assert finalize_subgraph(sg, row_spacing=ROW_SPACING) == 1
        term = sg.find_by_name("Terminator")
        assert term is not None
        assert sg.position(q) == (0, 0)
        assert sg.position(term.id) == (COLUMN_SPACING, 0)
