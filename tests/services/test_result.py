"""Tests for ServiceResult and ServiceError."""

import pytest

from dynblk.domain.errors import ContainerIOError, MissingDependency, RowExpressionMissing
from dynblk.services.result import ServiceError, ServiceResult


class TestServiceError:
    def test_from_missing_row(self) -> None:
        err = ServiceError.from_exception(RowExpressionMissing(3))
        assert err.code == "ROW_EXPRESSION_MISSING"
        assert err.detail == {"index": 3, "name": "inertia_row_3"}

    def test_from_missing_dependency(self) -> None:
        err = ServiceError.from_exception(MissingDependency("invinertia", "inertia"))
        assert err.detail == {"subgraph": "invinertia", "requires": "inertia"}

    def test_from_container_error(self) -> None:
        err = ServiceError.from_exception(ContainerIOError("lib.blklib", "disk full"))
        assert err.code == "CONTAINER_IO"
        assert err.detail == {"reason": "disk full", "path": "lib.blklib"}


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="generate")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None

    def test_failure(self) -> None:
        err = ServiceError(code="NOT_FOUND", message="gone")
        result = ServiceResult.failure("show", err, warnings=["w"])
        assert not result.ok
        assert result.error == err
        assert result.warnings == ["w"]

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="rows")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        result = ServiceResult(ok=True, op="generate", data={"joints": 2})
        assert ServiceResult.model_validate_json(result.model_dump_json()) == result
