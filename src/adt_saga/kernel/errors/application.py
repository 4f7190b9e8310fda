"""Application-layer errors — raised by sagas and the dispatch layer."""

from __future__ import annotations

from typing import Any

from adt_saga.kernel.errors.base import BaseError
from adt_saga.kernel.errors.kinds import ErrorKind


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class WorkflowError(ApplicationError):
    """A saga step failed with an already-classified kind.

    ``kind`` travels with the error so callers branch on it without
    re-inspecting transport details. ``step`` names the workflow step
    (``lock``, ``update``, ...) that failed, when known.
    """

    default_code = "workflow_error"

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        step: str | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("code", kind.value)
        super().__init__(message, **kwargs)
        self.kind = kind
        self.step = step

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["kind"] = self.kind.value
        if self.step is not None:
            base["step"] = self.step
        return base


class UnsupportedOperationError(WorkflowError):
    """No handler is registered for an ``(object_type, operation)`` pair."""

    default_code = "unsupported_operation"

    def __init__(self, object_type: str, operation: str, **kwargs: Any) -> None:
        super().__init__(
            ErrorKind.UNSUPPORTED_OPERATION,
            f"Unsupported {operation} for object_type: {object_type}",
            **kwargs,
        )
        self.object_type = object_type
        self.operation = operation


__all__ = [
    "ApplicationError",
    "UnsupportedOperationError",
    "WorkflowError",
]
