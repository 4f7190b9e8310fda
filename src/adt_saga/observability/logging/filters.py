"""Observability – SensitiveFieldsFilter and token masking."""
from __future__ import annotations

from typing import Any

#: Keys whose values never reach a log line: session cookies, CSRF tokens
#: and credentials.
DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "cookies",
        "cookie_store",
        "csrf_token",
        "password",
        "set-cookie",
        "x-csrf-token",
    }
)

#: Keys whose values are shortened by :func:`mask_token` instead of dropped.
DEFAULT_MASKED_FIELDS: frozenset[str] = frozenset({"lock_handle", "session_id"})


def mask_token(value: str | None, keep: int = 8) -> str | None:
    """Shorten an opaque handle to its first *keep* characters."""
    if value is None:
        return None
    if len(value) <= keep:
        return value
    return f"{value[:keep]}..."


class SensitiveFieldsFilter:
    """Replace values of sensitive keys with ``[REDACTED]``."""

    REDACTED = "[REDACTED]"

    def __init__(
        self,
        sensitive_fields: frozenset[str] | None = None,
        masked_fields: frozenset[str] | None = None,
    ) -> None:
        self._fields = frozenset(f.lower() for f in (sensitive_fields or DEFAULT_SENSITIVE_FIELDS))
        self._masked = frozenset(f.lower() for f in (masked_fields or DEFAULT_MASKED_FIELDS))

    def redact(self, data: dict[str, Any]) -> dict[str, Any]:
        return {k: (self.REDACTED if k.lower() in self._fields else v) for k, v in data.items()}

    def redact_deep(self, data: dict[str, Any]) -> dict[str, Any]:
        """Recursively redact nested dicts and the dicts inside lists."""
        result: dict[str, Any] = {}
        for k, v in data.items():
            key = k.lower() if isinstance(k, str) else k
            if key in self._fields:
                result[k] = self.REDACTED
            elif key in self._masked and isinstance(v, str):
                result[k] = mask_token(v)
            else:
                result[k] = self._redact_value(v)
        return result

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.redact_deep(value)
        if isinstance(value, (list, tuple)):
            return type(value)(self._redact_value(v) for v in value)
        return value


__all__ = ["DEFAULT_MASKED_FIELDS", "DEFAULT_SENSITIVE_FIELDS", "SensitiveFieldsFilter", "mask_token"]
