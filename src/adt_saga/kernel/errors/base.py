"""Root error class for the adt-saga error hierarchy."""

from __future__ import annotations

import json
from typing import Any

#: ``detail`` keys that may carry live session material.
SESSION_SECRET_KEYS = frozenset(
    {"authorization", "cookie", "cookies", "cookie_store", "csrf_token", "password", "x-csrf-token"}
)


class BaseError(Exception):
    """Root of every error a saga, the router or a loader raises.

    ``code`` is the slug that ends up in logs and envelopes; subclasses
    pick it through ``default_code`` (workflow errors use their kind).
    ``detail`` is free-form context such as an HTTP status; entries named in
    :data:`SESSION_SECRET_KEYS` are masked whenever the error is serialised,
    so a failed lock never prints the cookies it was sent with.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": {
                key: "[REDACTED]" if key.lower() in SESSION_SECRET_KEYS else value
                for key, value in self.detail.items()
            },
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload


__all__ = ["SESSION_SECRET_KEYS", "BaseError"]
