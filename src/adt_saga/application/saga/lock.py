"""Application saga – LockSaga: acquire, release and compensate edit locks."""

from __future__ import annotations

import uuid

from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.continuity import ConnectionContinuity
from adt_saga.kernel.errors import ErrorClassifier, ErrorKind, TransportError, WorkflowError
from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.session import LockAcquisition, SessionState
from adt_saga.observability.logging import get_logger, mask_token

logger = get_logger(__name__)


def new_session_id() -> str:
    return uuid.uuid4().hex


def classified_error(
    classifier: ErrorClassifier,
    exc: BaseException,
    step: str,
    *,
    prefix: str | None = None,
) -> WorkflowError:
    """Turn a transport failure into a :class:`WorkflowError` for *step*."""
    if isinstance(exc, WorkflowError) and prefix is None:
        return exc
    result = classifier.classify(exc)
    message = f"{prefix}: {result.message}" if prefix else result.message
    return WorkflowError(
        result.kind,
        message,
        step=step,
        detail={"status_code": result.status_code} if result.status_code else None,
        cause=exc,
    )


class LockSaga:
    """Lock lifecycle for one object on the context's connection.

    ``lock`` hands back a :class:`LockAcquisition` carrying the handle and
    the session snapshot taken right after locking; ``unlock`` must be given
    that acquisition so the handle is presented on the session that owns it.
    """

    def __init__(
        self,
        ctx: WorkflowContext,
        continuity: ConnectionContinuity | None = None,
    ) -> None:
        self._ctx = ctx
        self._continuity = continuity or ConnectionContinuity()

    async def lock(
        self,
        ref: ObjectRef,
        session_id: str | None = None,
        session_state: SessionState | None = None,
    ) -> LockAcquisition:
        """Acquire the edit lock for *ref*.

        A 404 surfaces as ``not_found`` and a 409/423 as ``locked``; neither
        is retried.
        """
        async with self._ctx.exclusive():
            return await self._lock(ref, session_id or new_session_id(), session_state)

    async def _lock(
        self,
        ref: ObjectRef,
        session_id: str,
        session_state: SessionState | None,
    ) -> LockAcquisition:
        connection = self._ctx.connection
        await self._continuity.restore(connection, session_id, session_state)
        try:
            handle = await self._ctx.client().lock(ref)
        except TransportError as exc:
            raise classified_error(self._ctx.classifier, exc, "lock") from exc
        if not handle:
            raise WorkflowError(
                ErrorKind.UNKNOWN,
                f"Lock of {ref} did not return a lock handle",
                step="lock",
            )
        acquisition = LockAcquisition(
            ref=ref,
            lock_handle=handle,
            session_id=session_id,
            session_state=self._continuity.snapshot(connection),
        )
        await self._record(ref, session_id, handle)
        logger.info(
            "lock.acquired",
            object=str(ref),
            lock_handle=mask_token(handle),
            session_id=mask_token(session_id),
        )
        return acquisition

    async def unlock(self, acquisition: LockAcquisition) -> SessionState | None:
        """Release *acquisition* on its own session; return the fresh session state."""
        async with self._ctx.exclusive():
            return await self._unlock(acquisition)

    async def _unlock(self, acquisition: LockAcquisition) -> SessionState | None:
        connection = self._ctx.connection
        await self._continuity.restore(
            connection, acquisition.session_id, acquisition.session_state
        )
        try:
            await self._ctx.client().unlock(acquisition.ref, acquisition.lock_handle)
        except TransportError as exc:
            raise classified_error(self._ctx.classifier, exc, "unlock") from exc
        await self._forget(acquisition.ref)
        logger.info(
            "lock.released",
            object=str(acquisition.ref),
            lock_handle=mask_token(acquisition.lock_handle),
        )
        return self._continuity.snapshot(connection)

    async def release(
        self,
        acquisition: LockAcquisition,
        cause: BaseException | None = None,
    ) -> bool:
        """Compensating unlock. Never raises; returns whether the lock is gone.

        Tries the held handle first. If that fails, falls back to
        :meth:`force_release`.
        """
        async with self._ctx.exclusive():
            try:
                await self._unlock(acquisition)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "lock.release_failed",
                    object=str(acquisition.ref),
                    lock_handle=mask_token(acquisition.lock_handle),
                    error=getattr(exc, "message", str(exc)),
                    cause=getattr(cause, "message", None) if cause is not None else None,
                )
                return await self._force_release(acquisition.ref)
            return True

    async def force_release(self, ref: ObjectRef) -> bool:
        """Release *ref* from a brand-new session with a brand-new lock.

        The previous session is never reused here: if its handle was just
        rejected, the same session would be rejected again.
        """
        async with self._ctx.exclusive():
            return await self._force_release(ref)

    async def _force_release(self, ref: ObjectRef) -> bool:
        connection = self._ctx.connection
        session_id = new_session_id()
        client = self._ctx.client()
        try:
            await self._continuity.fresh(connection, session_id)
            handle = await client.lock(ref)
            await client.unlock(ref, handle)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "lock.force_release_failed",
                object=str(ref),
                session_id=mask_token(session_id),
                error=getattr(exc, "message", str(exc)),
            )
            return False
        await self._forget(ref)
        logger.info("lock.force_released", object=str(ref), session_id=mask_token(session_id))
        return True

    # ------------------------------------------------------------------
    # Lock registry bookkeeping
    # ------------------------------------------------------------------

    async def _record(self, ref: ObjectRef, session_id: str, lock_handle: str) -> None:
        """Note a held lock. A registry failure never undoes the server lock."""
        registry = self._ctx.lock_registry
        if registry is None:
            return
        try:
            await registry.register(
                registry.record_for(ref, session_id=session_id, lock_handle=lock_handle)
            )
        except (OSError, ValueError) as exc:
            logger.warning("lock.registry_write_failed", object=str(ref), error=str(exc))

    async def _forget(self, ref: ObjectRef) -> None:
        registry = self._ctx.lock_registry
        if registry is None:
            return
        try:
            await registry.remove(ref)
        except (OSError, ValueError) as exc:
            logger.warning("lock.registry_write_failed", object=str(ref), error=str(exc))


__all__ = ["LockSaga", "classified_error", "new_session_id"]
