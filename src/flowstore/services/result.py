"""ServiceResult and ServiceError — return type for fallback-returning operations.

Operations that degrade instead of failing (the store's startup check and
the sanitize report) return a ServiceResult so the degraded path is part
of the signature. Lookup failures are still raised as exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Error codes carried by ``ServiceError.code``.
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
SANITIZE_DEGRADED = "SANITIZE_DEGRADED"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of an operation that reports degradation instead of raising.

    Attributes:
        ok: Whether the operation ran at full fidelity.
        op: Name of the operation (``"probe"`` or ``"sanitize"``).
        data: Operation-specific payload, present even when degraded.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (counts).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        *,
        meta: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data or {}, meta=meta)

    @classmethod
    def degraded(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Build an ``ok=False`` result whose payload is still usable."""
        return cls(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail or {}),
            meta=meta,
        )

    @property
    def code(self) -> str | None:
        """The error code, or None for a full-fidelity result."""
        return self.error.code if self.error is not None else None

    def log_fields(self) -> dict[str, Any]:
        """Flatten the result into structlog key/value pairs.

        Error detail wins over meta when both carry the same key.
        """
        fields: dict[str, Any] = {"op": self.op, "ok": self.ok}
        if self.meta:
            fields.update(self.meta)
        if self.error is not None:
            fields["code"] = self.error.code
            fields.update(self.error.detail)
        return fields
