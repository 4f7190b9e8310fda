"""Application saga – ConnectionContinuity."""

from __future__ import annotations

from adt_saga.kernel.ports import AdtConnection
from adt_saga.kernel.types.session import SessionState
from adt_saga.observability.logging import get_logger, mask_token

logger = get_logger(__name__)


class ConnectionContinuity:
    """Re-attaches a connection to a session captured by an earlier call.

    Each invocation may run in a different process, so the server session
    (cookies, CSRF token) travels with the caller as a :class:`SessionState`
    and is installed on the connection before any remote call. Nothing is
    validated here; a stale state is rejected by the next remote call.
    """

    async def restore(
        self,
        connection: AdtConnection,
        session_id: str | None = None,
        session_state: SessionState | None = None,
    ) -> None:
        """Make *connection* speak as ``(session_id, session_state)``.

        With a non-empty state the state is installed as-is. Without one the
        connection opens a fresh server session instead.
        """
        connection.set_session_id(session_id)
        connection.set_session_type(True)
        if session_state is not None and not session_state.is_empty():
            connection.set_session_state(session_state)
            logger.debug("session.restored", session_id=mask_token(session_id))
            return
        connection.set_session_state(None)
        await connection.connect()
        logger.debug("session.opened", session_id=mask_token(session_id))

    def snapshot(self, connection: AdtConnection) -> SessionState | None:
        """Capture the connection's current session after a rotating call."""
        return connection.get_session_state()

    async def fresh(self, connection: AdtConnection, session_id: str) -> SessionState | None:
        """Drop the current session and open a new one under *session_id*."""
        await self.restore(connection, session_id, None)
        return self.snapshot(connection)


__all__ = ["ConnectionContinuity"]
