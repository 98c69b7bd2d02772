"""LibraryService — read-only inspection of a generated block library."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dynblk.domain.blocks import NodeKind
from dynblk.domain.errors import ContainerIOError
from dynblk.services.base import BaseService
from dynblk.services.result import ServiceError, ServiceResult
from dynblk.services.telemetry import traced

if TYPE_CHECKING:
    from dynblk.infrastructure.graph.engine import Subgraph


def summarize(sg: Subgraph) -> dict[str, Any]:
    """Block counts per kind plus line count for one subgraph."""
    kinds = Counter(str(n.kind) for n in sg.nodes())
    summary: dict[str, Any] = {
        "blocks": len(sg),
        "lines": sg.number_of_lines,
        "kinds": dict(sorted(kinds.items())),
    }
    corrected = [
        sg.node(e.src).index
        for fix in sg.nodes(NodeKind.DIMENSION_CORRECTION)
        for e in sg.lines()
        if e.dst == fix.id and e.dst_port == 1
    ]
    if corrected:
        summary["corrected_rows"] = sorted(i for i in corrected if i is not None)
    return summary


def describe(sg: Subgraph) -> dict[str, Any]:
    """Full block and line listing for one subgraph."""
    names = {n.id: n.name for n in sg.nodes()}
    items = []
    for node in sg.nodes():
        params = {k: v for k, v in node.params.items() if k != "expression"}
        items.append(
            {
                "id": node.id,
                "name": node.name,
                "kind": str(node.kind),
                "ports": f"{node.inputs}/{node.outputs}",
                "params": params,
            }
        )
    lines = [
        {"from": f"{names[e.src]}:{e.src_port}", "to": f"{names[e.dst]}:{e.dst_port}"}
        for e in sg.lines()
    ]
    return {"name": sg.name, "count": len(items), "items": items, "lines": lines}


class LibraryService(BaseService):
    """Inspects libraries without modifying them."""

    @traced
    def show(
        self, subgraph: str | None = None, *, library_path: Path | None = None
    ) -> ServiceResult:
        """Describe the library, or one of its subgraphs when *subgraph* is given."""
        op = "show"
        path = library_path or self._settings.library_path
        if not path.exists():
            return ServiceResult.failure(
                op,
                ServiceError(
                    code="NOT_FOUND",
                    message=f"No block library at {path}",
                    detail={"path": str(path)},
                ),
            )

        try:
            session = self._manager.open_existing(path)
        except ContainerIOError as exc:
            return ServiceResult.failure(op, ServiceError.from_exception(exc))

        try:
            if subgraph is None:
                data: dict[str, Any] = {
                    "library": session.name,
                    "path": str(path),
                    "locked": session.locked,
                    "subgraphs": {
                        name: summarize(session.subgraph(name))
                        for name in session.subgraph_names()
                    },
                }
            elif session.has_subgraph(subgraph):
                data = describe(session.subgraph(subgraph))
            else:
                return ServiceResult.failure(
                    op,
                    ServiceError(
                        code="NOT_FOUND",
                        message=f"No subgraph '{subgraph}' in library '{session.name}'",
                        detail={"subgraph": subgraph, "available": session.subgraph_names()},
                    ),
                )
        finally:
            self._manager.close(session)

        return ServiceResult(ok=True, op=op, data=data)
