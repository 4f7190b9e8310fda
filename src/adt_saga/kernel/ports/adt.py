"""Remote repository ports — connection handle and object client."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.results import ActivationResult, CheckResult, ValidationResult
from adt_saga.kernel.types.session import SessionState


class AdtConnection(Protocol):
    """Port: an authenticated connection to the repository server.

    Treated as an opaque handle. The sagas only touch its session: they
    set the session id, switch it to stateful mode and install or read
    back :class:`SessionState` snapshots.
    """

    @property
    def session_id(self) -> str | None: ...

    def set_session_id(self, session_id: str | None) -> None: ...

    def set_session_type(self, stateful: bool) -> None: ...

    def get_session_state(self) -> SessionState | None: ...

    def set_session_state(self, state: SessionState | None) -> None: ...

    async def connect(self) -> None:
        """Open a fresh server session (new cookies, new CSRF token)."""
        ...

    async def close(self) -> None: ...


class AdtClient(Protocol):
    """Port: per-object operations against the repository.

    Every method raises :class:`~adt_saga.kernel.errors.TransportError`
    (carrying an HTTP-like status where there is one) on failure.
    """

    async def validate(
        self,
        ref: ObjectRef,
        *,
        package_name: str | None = None,
        description: str | None = None,
        for_update: bool = False,
    ) -> ValidationResult: ...

    async def create(
        self,
        ref: ObjectRef,
        *,
        package_name: str | None,
        description: str | None,
        transport_request: str | None = None,
        properties: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Create the object; may return server-assigned attributes (e.g. a request number)."""
        ...

    async def read(self, ref: ObjectRef, *, version: str = "active") -> dict[str, Any]: ...

    async def lock(self, ref: ObjectRef) -> str:
        """Acquire the edit lock and return its opaque handle."""
        ...

    async def unlock(self, ref: ObjectRef, lock_handle: str) -> None: ...

    async def update(
        self,
        ref: ObjectRef,
        payload: dict[str, Any],
        lock_handle: str,
        *,
        transport_request: str | None = None,
    ) -> None: ...

    async def check(
        self,
        ref: ObjectRef,
        *,
        version: str = "inactive",
        source: str | None = None,
    ) -> CheckResult: ...

    async def activate(self, ref: ObjectRef) -> ActivationResult: ...

    async def delete(self, ref: ObjectRef, *, transport_request: str | None = None) -> None: ...


#: Builds a client bound to one connection.
ClientFactory = Callable[[AdtConnection], AdtClient]


__all__ = ["AdtClient", "AdtConnection", "ClientFactory"]
