"""RowsService — check that every inertia row has been derived and saved."""

from __future__ import annotations

from pathlib import Path

from dynblk.domain.errors import RowExpressionInvalid
from dynblk.domain.expressions import row_name
from dynblk.infrastructure.symbols import RowExpressionStore
from dynblk.services.base import BaseService
from dynblk.services.result import ServiceError, ServiceResult
from dynblk.services.telemetry import traced


class RowsService(BaseService):
    """Reports the state of the row expression store."""

    @traced
    def check(
        self, *, joints: int | None = None, symbols_path: Path | None = None
    ) -> ServiceResult:
        """List present, missing and unreadable rows ``1..joints``."""
        op = "rows"
        joints = joints if joints is not None else self._settings.robot.joints
        if joints is None or joints < 1:
            return ServiceResult.failure(
                op,
                ServiceError(
                    code="INVALID_INPUT",
                    message="Joint count must be a positive integer (--joints or [robot] joints)",
                    detail={"joints": joints},
                ),
            )

        store = RowExpressionStore(symbols_path or self._settings.symbols_path)
        items = []
        missing: list[int] = []
        invalid: list[int] = []
        for k, present in store.available(joints).items():
            item = {"index": k, "name": row_name(k), "present": present}
            if not present:
                missing.append(k)
            else:
                try:
                    row = store.lookup(k)
                except RowExpressionInvalid as exc:
                    invalid.append(k)
                    item["error"] = exc.reason
                else:
                    item["zero"] = row.is_zero_row(joints)
                    item["symbols"] = row.free_symbols
            items.append(item)

        data = {
            "directory": str(store.directory),
            "joints": joints,
            "count": len(items),
            "items": items,
        }
        if missing or invalid:
            return ServiceResult.failure(
                op,
                ServiceError(
                    code="ROW_EXPRESSION_MISSING" if missing else "ROW_EXPRESSION_INVALID",
                    message=(
                        f"{len(missing)} missing and {len(invalid)} unreadable row "
                        f"expression(s) in {store.directory}"
                    ),
                    detail={"missing": missing, "invalid": invalid},
                ),
                data=data,
            )
        return ServiceResult(ok=True, op=op, data=data)
