"""Kernel time – Clock port used to timestamp lock records."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Port: source of the current time, swappable in tests."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """Test clock pinned to a fixed point in time until advanced."""

    def __init__(self, fixed: datetime | None = None) -> None:
        self._fixed = fixed or datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self._fixed

    def advance(self, seconds: float) -> None:
        self._fixed += timedelta(seconds=seconds)


__all__ = ["Clock", "FrozenClock", "SystemClock"]
