"""Application saga – StepRunner: single remote steps with error classification.

Each method performs exactly one remote call on the context's connection and
turns transport failures into :class:`WorkflowError` tagged with the step.
The edit saga composes these; the low-level step operations call them
directly.
"""

from __future__ import annotations

from typing import Any, Awaitable, TypeVar

from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.continuity import ConnectionContinuity
from adt_saga.application.saga.lock import classified_error, new_session_id
from adt_saga.kernel.errors import ErrorKind, TransportError, WorkflowError
from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.results import ActivationResult, CheckResult, ValidationResult
from adt_saga.kernel.types.session import LockAcquisition, SessionState
from adt_saga.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

CHECK_VERSIONS = frozenset({"active", "inactive"})


class StepRunner:
    def __init__(
        self,
        ctx: WorkflowContext,
        continuity: ConnectionContinuity | None = None,
    ) -> None:
        self._ctx = ctx
        self._continuity = continuity or ConnectionContinuity()

    @property
    def continuity(self) -> ConnectionContinuity:
        return self._continuity

    async def call(self, step: str, awaitable: Awaitable[T]) -> T:
        """Await one client call, classifying a transport failure."""
        try:
            return await awaitable
        except TransportError as exc:
            raise classified_error(self._ctx.classifier, exc, step) from exc

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def open_session(
        self,
        session_id: str | None = None,
        session_state: SessionState | None = None,
    ) -> str:
        """Attach the connection to the caller's session (or a new one)."""
        session_id = session_id or new_session_id()
        await self._continuity.restore(self._ctx.connection, session_id, session_state)
        return session_id

    async def resume(self, acquisition: LockAcquisition) -> None:
        """Attach the connection to the session that owns *acquisition*."""
        await self._continuity.restore(
            self._ctx.connection, acquisition.session_id, acquisition.session_state
        )

    def snapshot(self) -> SessionState | None:
        return self._continuity.snapshot(self._ctx.connection)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def validate(
        self,
        ref: ObjectRef,
        *,
        package_name: str | None = None,
        description: str | None = None,
        for_update: bool = False,
    ) -> ValidationResult:
        """Validate *ref*.

        With ``for_update`` an "already exists" answer, whether returned or
        raised, is reported as ``exists=True`` instead of a failure.
        """
        client = self._ctx.client()
        try:
            result = await client.validate(
                ref,
                package_name=package_name,
                description=description,
                for_update=for_update,
            )
        except TransportError as exc:
            if self._ctx.classifier.is_already_exists(exc):
                if for_update:
                    logger.info("step.validate_exists_ignored", object=str(ref))
                    return ValidationResult(valid=True, exists=True, message="Object already exists")
                raise WorkflowError(
                    ErrorKind.ALREADY_EXISTS,
                    f"{ref.object_type} {ref.name} already exists",
                    step="validate",
                    cause=exc,
                ) from exc
            raise classified_error(self._ctx.classifier, exc, "validate") from exc
        if for_update and result.exists:
            logger.info("step.validate_exists_ignored", object=str(ref))
            return ValidationResult(valid=True, exists=True, severity=result.severity, message=result.message)
        return result

    async def check(
        self,
        ref: ObjectRef,
        *,
        version: str = "inactive",
        source: str | None = None,
        failure_prefix: str = "Check failed",
    ) -> CheckResult:
        """Run a syntax check; a failed result raises ``bad_request``.

        An "already checked" response counts as passing.
        """
        if version not in CHECK_VERSIONS:
            raise WorkflowError(
                ErrorKind.BAD_REQUEST,
                f"version must be one of {sorted(CHECK_VERSIONS)}, got {version!r}",
                step="check",
            )
        try:
            result = await self._ctx.client().check(ref, version=version, source=source)
        except TransportError as exc:
            if self._ctx.classifier.is_already_checked(exc):
                logger.info("step.check_already_checked", object=str(ref))
                return CheckResult(passed=True)
            raise classified_error(
                self._ctx.classifier, exc, "check", prefix=failure_prefix
            ) from exc
        if not result.passed:
            raise WorkflowError(
                ErrorKind.BAD_REQUEST,
                f"{failure_prefix}: {result.summary() or 'check reported errors'}",
                step="check",
                detail={"messages": [m.to_dict() for m in result.messages]},
            )
        return result

    async def update(
        self,
        acquisition: LockAcquisition,
        payload: dict[str, Any],
        *,
        transport_request: str | None = None,
    ) -> LockAcquisition:
        """Write *payload* under the held lock; return the acquisition with a fresh session."""
        await self.resume(acquisition)
        await self.call(
            "update",
            self._ctx.client().update(
                acquisition.ref,
                payload,
                acquisition.lock_handle,
                transport_request=transport_request,
            ),
        )
        return acquisition.with_session(self.snapshot())

    async def create(
        self,
        ref: ObjectRef,
        *,
        package_name: str | None,
        description: str | None,
        transport_request: str | None = None,
        properties: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Create *ref*; an "already exists" answer maps to ``already_exists`` whatever its status."""
        try:
            return await self._ctx.client().create(
                ref,
                package_name=package_name,
                description=description,
                transport_request=transport_request,
                properties=properties,
            )
        except TransportError as exc:
            if self._ctx.classifier.is_already_exists(exc):
                raise WorkflowError(
                    ErrorKind.ALREADY_EXISTS,
                    f"{ref.object_type} {ref.name} already exists",
                    step="create",
                    cause=exc,
                ) from exc
            raise classified_error(self._ctx.classifier, exc, "create") from exc

    async def activate(self, ref: ObjectRef) -> ActivationResult:
        result = await self.call("activate", self._ctx.client().activate(ref))
        if not result.activated:
            errors = "; ".join(m.text for m in result.messages if m.is_error)
            raise WorkflowError(
                ErrorKind.BAD_REQUEST,
                f"Activation of {ref} failed: {errors or 'not activated'}",
                step="activate",
                detail={"messages": [m.to_dict() for m in result.messages]},
            )
        return result


__all__ = ["CHECK_VERSIONS", "StepRunner"]
