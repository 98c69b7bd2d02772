"""GenerateService — one full regeneration run of the block library.

Run order::

    open/create library -> unlock
      -> inertia subgraph   (persisted)
      -> inverse subgraph   (persisted)
      -> library layout
    -> lock, persist, close

A failing build has already rolled back its in-memory edits, so the
library is still locked and saved on the way out; the file then matches
the last completed checkpoint. I/O failures close the session without
another save attempt.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dynblk.config.logging import run_context
from dynblk.domain.capabilities import Capabilities
from dynblk.domain.errors import (
    BlockLibraryError,
    ContainerIOError,
    MissingDependency,
    RowExpressionInvalid,
    RowExpressionMissing,
)
from dynblk.infrastructure.graph.passes import arrange_library
from dynblk.infrastructure.symbols import RowExpressionStore, RowLookup
from dynblk.services.base import BaseService
from dynblk.services.inertia import build_inertia_subgraph
from dynblk.services.inverse import build_inverse_subgraph
from dynblk.services.library import summarize
from dynblk.services.result import ServiceError, ServiceResult
from dynblk.services.telemetry import get_current_span, trace_span, traced

if TYPE_CHECKING:
    from dynblk.infrastructure.library import LibrarySession

logger = logging.getLogger(__name__)

_BUILD_ERRORS = (RowExpressionMissing, RowExpressionInvalid, MissingDependency)


class GenerateService(BaseService):
    """Builds the inertia and inverse inertia blocks into the library."""

    @traced
    def generate(
        self,
        *,
        joints: int | None = None,
        row_lookup: RowLookup | None = None,
        library_path: Path | None = None,
        symbols_path: Path | None = None,
        zero_row_quirk: bool | None = None,
    ) -> ServiceResult:
        """Regenerate both blocks.

        Args:
            joints: Joint count; defaults to ``[robot] joints``.
            row_lookup: Row source; defaults to the on-disk store in
                *symbols_path* (or ``[symbols] directory``).
            library_path: Library file; defaults to the configured path.
            symbols_path: Directory of saved row expressions.
            zero_row_quirk: Force the degenerate-row correction on/off.
        """
        op = "generate"
        settings = self._settings

        joints = joints if joints is not None else settings.robot.joints
        if joints is None or joints < 1:
            return ServiceResult.failure(
                op,
                ServiceError(
                    code="INVALID_INPUT",
                    message="Joint count must be a positive integer (--joints or [robot] joints)",
                    detail={"joints": joints},
                ),
            )

        if zero_row_quirk is None:
            capabilities = settings.capabilities()
        else:
            capabilities = Capabilities(collapses_zero_rows=zero_row_quirk)
        lookup = row_lookup or RowExpressionStore(symbols_path or settings.symbols_path)
        path = library_path or settings.library_path
        layout = settings.layout.model_dump()
        names = settings.blocks
        coordinate = settings.robot.coordinate

        span = get_current_span()
        if span is not None:
            span.annotate("joints", joints)
            span.annotate("collapses_zero_rows", capabilities.collapses_zero_rows)

        with run_context(settings.library.name):
            try:
                session = self._manager.open_or_create(settings.library.name, path)
            except ContainerIOError as exc:
                logger.info("Cannot open block library: %s", exc)
                return ServiceResult.failure(op, ServiceError.from_exception(exc))

            try:
                self._manager.unlock(session)
                with trace_span("inertia"):
                    inertia = build_inertia_subgraph(
                        session,
                        joints,
                        lookup,
                        capabilities,
                        name=names.inertia,
                        coordinate=coordinate,
                        layout=layout,
                    )
                with trace_span("inverse"):
                    inverse = build_inverse_subgraph(
                        session,
                        names.inertia,
                        name=names.inverse,
                        coordinate=coordinate,
                        layout=layout,
                    )
                arrange_library(session, spacing=layout["column_spacing"])
                data: dict[str, Any] = {
                    "library": session.name,
                    "path": str(path),
                    "joints": joints,
                    "collapses_zero_rows": capabilities.collapses_zero_rows,
                    "subgraphs": {
                        inertia.name: summarize(inertia),
                        inverse.name: summarize(inverse),
                    },
                }
            except _BUILD_ERRORS as exc:
                logger.info("Block generation aborted: %s", exc)
                warnings = self._relock(session)
                return ServiceResult.failure(
                    op, ServiceError.from_exception(exc), warnings=warnings
                )
            except ContainerIOError as exc:
                logger.info("Block library I/O failed: %s", exc)
                self._manager.close(session)
                return ServiceResult.failure(op, ServiceError.from_exception(exc))
            except BaseException:
                self._manager.close(session)
                raise

            try:
                self._manager.finalize(session)
            except ContainerIOError as exc:
                logger.info("Cannot save block library: %s", exc)
                return ServiceResult.failure(op, ServiceError.from_exception(exc))

        data["locked"] = True
        logger.info("Block library %s saved to %s", data["library"], path)
        return ServiceResult(ok=True, op=op, data=data)

    def _relock(self, session: LibrarySession) -> list[str]:
        """Lock and save a session after a failed build. Returns warnings."""
        try:
            self._manager.finalize(session)
        except BlockLibraryError as exc:
            logger.info("Could not re-lock library after failure: %s", exc)
            return [f"Library was not re-locked: {exc}"]
        return []
