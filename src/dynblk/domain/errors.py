"""Error taxonomy for block library generation.

Every error here is fatal for the current run. Name conflicts between an
existing subgraph and the one being built are not errors: builders delete
and rebuild instead.
"""

from __future__ import annotations

from pathlib import Path


class BlockLibraryError(Exception):
    """Base class for all generation failures."""

    code = "BLOCK_LIBRARY"


class ContainerIOError(BlockLibraryError):
    """The library file cannot be opened, created, or saved."""

    code = "CONTAINER_IO"

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Block library {self.path}: {reason}")


class RowExpressionMissing(BlockLibraryError):
    """A precomputed inertia row expression was not found."""

    code = "ROW_EXPRESSION_MISSING"

    def __init__(self, index: int, name: str | None = None) -> None:
        self.index = index
        self.name = name or f"inertia_row_{index}"
        super().__init__(
            f"Row expression {self.name} (row {index}) not found. "
            "Save symbolic expressions to disk first!"
        )


class RowExpressionInvalid(BlockLibraryError):
    """A stored row expression exists but cannot be used."""

    code = "ROW_EXPRESSION_INVALID"

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Row expression for row {index} is invalid: {reason}")


class MissingDependency(BlockLibraryError):
    """A subgraph was requested before the subgraph it instantiates exists."""

    code = "MISSING_DEPENDENCY"

    def __init__(self, subgraph: str, requires: str) -> None:
        self.subgraph = subgraph
        self.requires = requires
        super().__init__(
            f"Cannot build '{subgraph}': required subgraph '{requires}' "
            "does not exist in the library"
        )
