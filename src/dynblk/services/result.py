"""ServiceResult and ServiceError — the contract between services and the CLI.

Builders raise typed exceptions (:mod:`dynblk.domain.errors`); services
catch them at the run boundary and report a ServiceResult, so the CLI
never has to know about individual exception classes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from dynblk.domain.errors import BlockLibraryError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BlockLibraryError) -> ServiceError:
        """Build an error payload carrying the identifying fields of *exc*."""
        detail: dict[str, Any] = {}
        for attr in ("index", "name", "subgraph", "requires", "reason"):
            if hasattr(exc, attr):
                detail[attr] = getattr(exc, attr)
        if hasattr(exc, "path"):
            detail["path"] = str(exc.path)
        return cls(code=exc.code, message=str(exc), detail=detail)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"generate"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, telemetry).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, error: ServiceError, **kwargs: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=error, **kwargs)
