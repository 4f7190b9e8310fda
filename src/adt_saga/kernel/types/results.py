"""Results returned by the remote client port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CheckMessage:
    """A single finding of a check or activation run."""

    severity: str
    text: str
    line: int | None = None

    @property
    def is_error(self) -> bool:
        return self.severity.upper() in ("E", "ERROR", "A", "ABORT")

    @property
    def is_warning(self) -> bool:
        return self.severity.upper() in ("W", "WARNING")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"severity": self.severity, "text": self.text}
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass(frozen=True)
class CheckResult:
    passed: bool
    messages: tuple[CheckMessage, ...] = ()

    @property
    def errors(self) -> tuple[CheckMessage, ...]:
        return tuple(m for m in self.messages if m.is_error)

    def summary(self) -> str:
        texts = [m.text for m in self.errors] or [m.text for m in self.messages]
        return "; ".join(texts)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a name/package validation.

    ``exists`` is reported separately from ``valid`` so that update-style
    validation can tolerate an object that is already there.
    """

    valid: bool
    exists: bool = False
    severity: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "exists": self.exists,
            "severity": self.severity,
            "message": self.message,
        }


@dataclass(frozen=True)
class ActivationResult:
    activated: bool
    checked: bool = True
    generated: bool = False
    messages: tuple[CheckMessage, ...] = field(default_factory=tuple)

    @property
    def warnings(self) -> tuple[CheckMessage, ...]:
        return tuple(m for m in self.messages if m.is_warning or m.is_error)


__all__ = [
    "ActivationResult",
    "CheckMessage",
    "CheckResult",
    "ValidationResult",
]
