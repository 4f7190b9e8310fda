"""Infrastructure errors — failures at the transport boundary."""

from __future__ import annotations

from typing import Any

from adt_saga.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class TransportError(InfrastructureError):
    """A remote call failed.

    ``status_code`` is the HTTP-like status when the remote answered;
    ``raw_body`` holds the response body (text or decoded JSON) so the
    classifier can inspect it without every call site re-parsing.
    """

    default_code = "transport_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        raw_body: str | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.raw_body = raw_body

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["status_code"] = self.status_code
        return base


__all__ = ["InfrastructureError", "TransportError"]
