"""ResponseEnvelope — the uniform result of every routed operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from adt_saga.kernel.errors.kinds import ErrorKind


@dataclass(frozen=True)
class ResponseEnvelope:
    """``{success, data}`` on success, ``{success, error_message, error_kind}`` otherwise."""

    success: bool
    data: dict[str, Any] | None = None
    error_message: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: dict[str, Any] | None = None) -> ResponseEnvelope:
        return cls(success=True, data=dict(data or {}))

    @classmethod
    def fail(cls, message: str, kind: ErrorKind = ErrorKind.UNKNOWN) -> ResponseEnvelope:
        return cls(success=False, error_message=message, error_kind=kind)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data or {}}
        return {
            "success": False,
            "error_message": self.error_message,
            "error_kind": (self.error_kind or ErrorKind.UNKNOWN).value,
        }


__all__ = ["ResponseEnvelope"]
