"""Session continuity value types — SessionState and LockAcquisition."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from adt_saga.kernel.types.refs import ObjectRef


def _freeze(store: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(store or {}))


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a stateful remote session.

    Holds the serialised ``Cookie`` header, the CSRF token and the per-name
    cookie store. Instances are immutable; the caller owns them between
    invocations and passes them back in to resume the same server session.
    """

    cookies: str | None = None
    csrf_token: str | None = None
    cookie_store: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cookie_store", _freeze(self.cookie_store))

    def is_empty(self) -> bool:
        return not (self.cookies or self.csrf_token or self.cookie_store)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cookies": self.cookies,
            "csrf_token": self.csrf_token,
            "cookie_store": dict(self.cookie_store),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SessionState | None:
        """Build from the JSON shape; ``None`` or ``{}`` yield ``None``.

        Accepts both ``csrf_token``/``cookie_store`` and the camelCase keys
        connection libraries tend to emit.
        """
        if not data:
            return None
        csrf = data.get("csrf_token", data.get("csrfToken"))
        store = data.get("cookie_store", data.get("cookieStore")) or {}
        return cls(
            cookies=data.get("cookies") or None,
            csrf_token=csrf or None,
            cookie_store={str(k): str(v) for k, v in dict(store).items()},
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SessionState):
            return NotImplemented
        return (
            self.cookies == other.cookies
            and self.csrf_token == other.csrf_token
            and dict(self.cookie_store) == dict(other.cookie_store)
        )

    def __hash__(self) -> int:
        return hash((self.cookies, self.csrf_token, tuple(sorted(self.cookie_store.items()))))


@dataclass(frozen=True)
class LockAcquisition:
    """A held lock: opaque handle scoped to one object and one session.

    ``session_state`` is the snapshot taken right after the lock call; every
    later step that uses ``lock_handle`` must run on exactly that session.
    """

    ref: ObjectRef
    lock_handle: str
    session_id: str
    session_state: SessionState | None = None

    def with_session(self, session_state: SessionState | None) -> LockAcquisition:
        """Return a copy carrying a fresher session snapshot."""
        return replace(self, session_state=session_state)

    def to_dict(self) -> dict[str, Any]:
        return {
            "object_type": self.ref.object_type,
            "object_name": self.ref.name,
            "parent": self.ref.parent,
            "lock_handle": self.lock_handle,
            "session_id": self.session_id,
            "session_state": self.session_state.to_dict() if self.session_state else None,
        }


__all__ = ["LockAcquisition", "SessionState"]
