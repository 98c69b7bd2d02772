"""Inertia row expressions.

A row expression is the k-th row of the joint-space inertia matrix,
a 1xN SymPy matrix in the generalized coordinates ``q1..qN``. The
derivation step that produces them lives outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import sympy

ROW_NAME_PREFIX = "inertia_row_"


def row_name(index: int) -> str:
    """Return the stored name of row *index* (``inertia_row_<index>``)."""
    return f"{ROW_NAME_PREFIX}{index}"


def coordinates(joints: int, prefix: str = "q") -> list[sympy.Symbol]:
    """Return the generalized coordinate symbols ``q1..qN``."""
    return list(sympy.symbols(f"{prefix}1:{joints + 1}"))


@dataclass(frozen=True)
class RowExpression:
    """One row of the inertia matrix, keyed by its 1-based row index."""

    index: int
    expr: sympy.ImmutableMatrix

    def __post_init__(self) -> None:
        if not isinstance(self.expr, sympy.ImmutableMatrix):
            object.__setattr__(self, "expr", sympy.ImmutableMatrix(self.expr))
        if self.expr.rows != 1:
            msg = f"Row {self.index} must be a 1xN matrix, got shape {self.expr.shape}"
            raise ValueError(msg)

    @classmethod
    def of(cls, index: int, value: Any) -> RowExpression:
        """Build a row from a SymPy matrix, a flat list, or a nested 1xN list."""
        if isinstance(value, sympy.MatrixBase):
            return cls(index=index, expr=sympy.ImmutableMatrix(value))
        items = list(value)
        if items and all(isinstance(i, (list, tuple)) for i in items):
            return cls(index=index, expr=sympy.ImmutableMatrix(items))
        return cls(index=index, expr=sympy.ImmutableMatrix([items]))

    @property
    def name(self) -> str:
        return row_name(self.index)

    @property
    def width(self) -> int:
        return self.expr.cols

    @property
    def free_symbols(self) -> list[str]:
        return sorted(str(s) for s in self.expr.free_symbols)

    def is_zero_row(self, joints: int) -> bool:
        """True when this row is exactly the 1xN zero row.

        Every entry must be a number equal to zero; ``0`` and ``0.0`` both
        count. Rows that merely simplify to zero, or are numerically close
        to it, do not.
        """
        return self.expr.shape == (1, joints) and all(
            e.is_number and e.is_zero for e in self.expr
        )
