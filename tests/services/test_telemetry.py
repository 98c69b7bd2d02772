"""Tests for telemetry spans and the @traced decorator."""

from __future__ import annotations

import time

from dynblk.config.settings import DynblkSettings
from dynblk.infrastructure.library import LibraryManager
from dynblk.infrastructure.symbols import InMemoryRowStore
from dynblk.services.generate import GenerateService
from dynblk.services.result import ServiceResult
from dynblk.services.telemetry import (
    Span,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="s").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="s")
        time.sleep(0.002)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict(self) -> None:
        root = Span(name="root")
        root.annotate("joints", 2)
        root.children.append(Span(name="child", parent=root))
        d = root.to_dict()
        assert d["name"] == "root"
        assert d["annotations"] == {"joints": 2}
        assert [c["name"] for c in d["children"]] == ["child"]


class TestDisabled:
    def test_trace_span_yields_none(self) -> None:
        with trace_span("x") as span:
            assert span is None

    def test_traced_leaves_meta_alone(self) -> None:
        @traced
        def op() -> ServiceResult:
            return ServiceResult(ok=True, op="op")

        assert op().meta is None
        assert get_current_span() is None


class TestEnabled:
    def test_traced_injects_span_tree(self) -> None:
        enable_telemetry()

        @traced
        def op() -> ServiceResult:
            with trace_span("inner") as span:
                assert span is not None
            return ServiceResult(ok=True, op="op")

        result = op()
        assert result.meta is not None
        tree = result.meta["telemetry"]
        assert [c["name"] for c in tree["children"]] == ["inner"]

    def test_generate_span_tree(
        self, settings: DynblkSettings, manager: LibraryManager, two_joint_rows: InMemoryRowStore
    ) -> None:
        enable_telemetry()
        result = GenerateService(settings, manager).generate(joints=2, row_lookup=two_joint_rows)

        assert result.meta is not None
        tree = result.meta["telemetry"]
        assert tree["name"] == "GenerateService.generate"
        assert tree["annotations"] == {"joints": 2, "collapses_zero_rows": False}
        children = {c["name"]: c for c in tree["children"]}
        assert set(children) == {"inertia", "inverse"}
        assert [c["name"] for c in children["inertia"]["children"]] == ["row_1", "row_2"]
