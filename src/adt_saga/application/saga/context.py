"""Application saga – WorkflowContext."""

from __future__ import annotations

import asyncio
import contextlib
from collections import OrderedDict
from collections.abc import AsyncIterator
from typing import Any

from adt_saga.application.saga.store import LockRegistry
from adt_saga.kernel.errors import ErrorClassifier
from adt_saga.kernel.ports import AdtClient, AdtConnection, ClientFactory
from adt_saga.observability.logging import get_logger

logger = get_logger(__name__)


class WorkflowContext:
    """Everything a saga needs besides its per-call arguments.

    Holds the connection, the factory that binds clients to it, a small LRU
    of already-built clients keyed by connection identity, the classifier
    and the optional lock registry. There is no module-level state: each
    caller builds one context and tears it down explicitly.

    The connection carries a single server session at a time, so saga runs
    on one context take turns through :meth:`exclusive`. Concurrent callers
    that need parallel sessions build one context per connection.

    Example::

        async with WorkflowContext(connection, client_factory) as ctx:
            await invoke(ctx, "CLASS", "update", {...})
    """

    def __init__(
        self,
        connection: AdtConnection,
        client_factory: ClientFactory,
        *,
        lock_registry: LockRegistry | None = None,
        classifier: ErrorClassifier | None = None,
        cache_size: int = 8,
    ) -> None:
        if cache_size < 1:
            raise ValueError("cache_size must be at least 1")
        self._connection = connection
        self._client_factory = client_factory
        self._clients: OrderedDict[int, tuple[AdtConnection, AdtClient]] = OrderedDict()
        self._cache_size = cache_size
        self.lock_registry = lock_registry
        self.classifier = classifier or ErrorClassifier()
        self._session_lock = asyncio.Lock()
        self._session_owner: asyncio.Task[Any] | None = None

    # ------------------------------------------------------------------
    # Connection / client access
    # ------------------------------------------------------------------

    @property
    def connection(self) -> AdtConnection:
        return self._connection

    def client(self) -> AdtClient:
        """Return the client bound to the current connection, building it once."""
        key = id(self._connection)
        cached = self._clients.get(key)
        if cached is not None and cached[0] is self._connection:
            self._clients.move_to_end(key)
            return cached[1]
        client = self._client_factory(self._connection)
        self._clients[key] = (self._connection, client)
        self._clients.move_to_end(key)
        while len(self._clients) > self._cache_size:
            self._clients.popitem(last=False)
        return client

    def replace_connection(self, connection: AdtConnection) -> None:
        """Swap in *connection* and evict the client bound to the old one."""
        self._clients.pop(id(self._connection), None)
        self._connection = connection
        logger.debug("context.connection_replaced")

    @contextlib.asynccontextmanager
    async def exclusive(self) -> AsyncIterator[WorkflowContext]:
        """Hold the connection for one saga run.

        Re-entrant within the owning task, so a routed call may run a saga
        that runs the lock saga without deadlocking itself.
        """
        task = asyncio.current_task()
        if task is not None and self._session_owner is task:
            yield self
            return
        async with self._session_lock:
            self._session_owner = task
            try:
                yield self
            finally:
                self._session_owner = None

    @property
    def cached_clients(self) -> int:
        return len(self._clients)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def teardown(self) -> None:
        """Drop every cached client and close the connection."""
        self._clients.clear()
        await self._connection.close()

    async def __aenter__(self) -> WorkflowContext:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.teardown()


__all__ = ["WorkflowContext"]
