"""Row expression store — precomputed inertia rows on disk.

The derivation step writes one JSON file per row into the symbols
directory (``inertia_row_<k>.json``). Each file carries the row as
``sympy.srepr`` text so it round-trips exactly, including structural
zeros. Block generation only reads from the store.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import sympy

from dynblk.domain.errors import RowExpressionInvalid, RowExpressionMissing
from dynblk.domain.expressions import RowExpression, row_name

logger = logging.getLogger(__name__)

ROW_FILE_SUFFIX = ".json"


class RowLookup(Protocol):
    """Anything that resolves a 1-based row index to its expression."""

    def __call__(self, index: int) -> RowExpression: ...


class RowExpressionStore:
    """Directory-backed store of inertia row expressions."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def __call__(self, index: int) -> RowExpression:
        return self.lookup(index)

    def path_for(self, index: int) -> Path:
        return self.directory / f"{row_name(index)}{ROW_FILE_SUFFIX}"

    def exists(self, index: int) -> bool:
        return self.path_for(index).is_file()

    def lookup(self, index: int) -> RowExpression:
        """Load row *index*.

        Raises RowExpressionMissing if no file exists for the row and
        RowExpressionInvalid if the file cannot be decoded.
        """
        path = self.path_for(index)
        if not path.is_file():
            raise RowExpressionMissing(index, row_name(index))
        try:
            payload: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
            expr = sympy.sympify(payload["expression"])
        except (OSError, ValueError, KeyError, TypeError, sympy.SympifyError) as exc:
            raise RowExpressionInvalid(index, f"{path.name}: {exc}") from exc

        if not isinstance(expr, sympy.MatrixBase):
            kind = type(expr).__name__
            raise RowExpressionInvalid(index, f"{path.name}: expected a matrix, got {kind}")
        try:
            return RowExpression(index=index, expr=sympy.ImmutableMatrix(expr))
        except ValueError as exc:
            raise RowExpressionInvalid(index, str(exc)) from exc

    def save(self, index: int, expr: Any) -> Path:
        """Write row *index*. Accepts a SymPy matrix or a flat list of entries."""
        row = RowExpression.of(index, expr)
        path = self.path_for(index)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "name": row.name,
            "shape": list(row.expr.shape),
            "expression": sympy.srepr(row.expr),
        }
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        logger.debug("Saved %s to %s", row.name, path)
        return path

    def available(self, joints: int) -> dict[int, bool]:
        """Presence of rows ``1..joints`` as ``{index: exists}``."""
        return {k: self.exists(k) for k in range(1, joints + 1)}


class InMemoryRowStore:
    """Row lookup over a mapping of ``index -> matrix``.

    Used when the derivation runs in the same process as generation.
    """

    def __init__(self, rows: Mapping[int, Any]) -> None:
        self._rows = {k: RowExpression.of(k, v) for k, v in rows.items()}

    def __call__(self, index: int) -> RowExpression:
        return self.lookup(index)

    def lookup(self, index: int) -> RowExpression:
        try:
            return self._rows[index]
        except KeyError:
            raise RowExpressionMissing(index, row_name(index)) from None

    def available(self, joints: int) -> dict[int, bool]:
        return {k: k in self._rows for k in range(1, joints + 1)}
