"""Application saga – EditSaga: create / update / delete / get of one object.

One generic saga serves every object type; per-type differences come from
the :class:`ObjectTypeDescriptor`. Steps run strictly in sequence. Once a
lock is held, every exit path unlocks: on failure the held lock is released
(compensation) before the original error propagates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.continuity import ConnectionContinuity
from adt_saga.application.saga.descriptor import ObjectTypeDescriptor, UpdateStyle
from adt_saga.application.saga.lock import LockSaga, classified_error
from adt_saga.application.saga.state import EditRun, EditState
from adt_saga.application.saga.steps import CHECK_VERSIONS, StepRunner
from adt_saga.kernel.errors import ErrorKind, TransportError, WorkflowError
from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.session import LockAcquisition, SessionState
from adt_saga.observability.logging import get_logger, mask_token

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Requests / outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateRequest:
    ref: ObjectRef
    package_name: str | None = None
    description: str | None = None
    transport_request: str | None = None
    source_code: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    activate: bool | None = None
    session_id: str | None = None
    session_state: SessionState | None = None


@dataclass(frozen=True)
class UpdateRequest:
    ref: ObjectRef
    source_code: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    package_name: str | None = None
    description: str | None = None
    transport_request: str | None = None
    activate: bool | None = None
    session_id: str | None = None
    session_state: SessionState | None = None


@dataclass
class EditOutcome:
    """What a finished saga run reports back to the caller."""

    ref: ObjectRef
    run: EditRun
    activated: bool = False
    already_deleted: bool = False
    message: str | None = None
    activation_warnings: list[str] = field(default_factory=list)
    check_warnings: list[str] = field(default_factory=list)
    content: dict[str, Any] | None = None
    created: dict[str, Any] | None = None
    session_id: str | None = None
    session_state: SessionState | None = None

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.ref.name,
            "object_type": self.ref.object_type,
            "activated": self.activated,
            "steps_completed": list(self.run.steps_completed),
        }
        if self.ref.parent:
            data["parent"] = self.ref.parent
        if self.message:
            data["message"] = self.message
        if self.already_deleted:
            data["already_deleted"] = True
        if self.activation_warnings:
            data["activation_warnings"] = list(self.activation_warnings)
        if self.check_warnings:
            data["check_warnings"] = list(self.check_warnings)
        if self.content is not None:
            data["content"] = self.content
        if self.created:
            data.update(self.created)
        if self.session_id is not None:
            data["session_id"] = self.session_id
            data["session_state"] = self.session_state.to_dict() if self.session_state else None
        return data


# ---------------------------------------------------------------------------
# Saga
# ---------------------------------------------------------------------------


class EditSaga:
    """Runs the edit workflows for objects of one type."""

    def __init__(
        self,
        ctx: WorkflowContext,
        descriptor: ObjectTypeDescriptor,
        *,
        continuity: ConnectionContinuity | None = None,
    ) -> None:
        continuity = continuity or ConnectionContinuity()
        self._ctx = ctx
        self._descriptor = descriptor
        self._steps = StepRunner(ctx, continuity)
        self._locks = LockSaga(ctx, continuity)

    @property
    def descriptor(self) -> ObjectTypeDescriptor:
        return self._descriptor

    # ------------------------------------------------------------------
    # Public workflows
    # ------------------------------------------------------------------

    async def create(self, request: CreateRequest) -> EditOutcome:
        """validate → create → [lock → update → check → unlock] → [activate]."""
        async with self._ctx.exclusive():
            return await self._create(request)

    async def update(self, request: UpdateRequest) -> EditOutcome:
        async with self._ctx.exclusive():
            if self._descriptor.update_style is UpdateStyle.METADATA:
                return await self._update_metadata(request)
            return await self._update_source(request)

    async def delete(
        self,
        ref: ObjectRef,
        *,
        transport_request: str | None = None,
        session_id: str | None = None,
        session_state: SessionState | None = None,
    ) -> EditOutcome:
        """Delete *ref*. A missing object is reported as already deleted."""
        async with self._ctx.exclusive():
            return await self._delete(ref, transport_request, session_id, session_state)

    async def get(
        self,
        ref: ObjectRef,
        *,
        version: str = "active",
        session_id: str | None = None,
        session_state: SessionState | None = None,
    ) -> EditOutcome:
        async with self._ctx.exclusive():
            return await self._get(ref, version, session_id, session_state)

    # ------------------------------------------------------------------
    # Workflow bodies, run while holding the connection
    # ------------------------------------------------------------------

    async def _create(self, request: CreateRequest) -> EditOutcome:
        ref = request.ref
        run = EditRun("create", ref)
        try:
            self._require_transport(ref, request.package_name, request.transport_request)
            session_id = await self._steps.open_session(request.session_id, request.session_state)

            run.advance(EditState.VALIDATING)
            if self._descriptor.validates_on_create:
                result = await self._steps.validate(
                    ref,
                    package_name=request.package_name,
                    description=request.description,
                )
                if result.exists:
                    raise WorkflowError(
                        ErrorKind.ALREADY_EXISTS,
                        f"{ref.object_type} {ref.name} already exists",
                        step="validate",
                    )
                if not result.valid:
                    raise WorkflowError(
                        ErrorKind.BAD_REQUEST,
                        f"Validation of {ref} failed: {result.message or 'name rejected'}",
                        step="validate",
                    )
                run.step_done("validate")

            created = await self._steps.create(
                ref,
                package_name=request.package_name,
                description=request.description,
                transport_request=request.transport_request,
                properties=dict(request.properties) or None,
            )
            run.advance(EditState.CREATED)
            run.step_done("create")
            logger.info("edit.created", object=str(ref), package=request.package_name)

            payload = self._create_payload(request)
            if payload is not None:
                acquisition = await self._locks.lock(ref, session_id, self._steps.snapshot())
                run.advance(EditState.LOCKED)
                run.step_done("lock")
                await self._edit_under_lock(
                    run,
                    acquisition,
                    payload,
                    transport_request=request.transport_request,
                    check_source_first=False,
                )

            outcome = EditOutcome(ref=ref, run=run, created=created, session_id=session_id)
            await self._finish(run, outcome, request.activate)
            return outcome
        except Exception:
            self._fail(run)
            raise

    async def _delete(
        self,
        ref: ObjectRef,
        transport_request: str | None,
        session_id: str | None,
        session_state: SessionState | None,
    ) -> EditOutcome:
        run = EditRun("delete", ref)
        try:
            session_id = await self._steps.open_session(session_id, session_state)
            try:
                await self._ctx.client().delete(ref, transport_request=transport_request)
            except TransportError as exc:
                error = classified_error(self._ctx.classifier, exc, "delete")
                if error.kind is ErrorKind.NOT_FOUND:
                    run.advance(EditState.DONE)
                    logger.info("edit.delete_missing", object=str(ref))
                    return EditOutcome(
                        ref=ref,
                        run=run,
                        already_deleted=True,
                        message=f"{ref.object_type} {ref.name} not found; it was already deleted or never existed",
                    )
                if error.kind is ErrorKind.BAD_REQUEST and not transport_request:
                    raise WorkflowError(
                        ErrorKind.BAD_REQUEST,
                        f"{error.message} (a transport_request may be required)",
                        step="delete",
                        cause=exc,
                    ) from exc
                raise error from exc
            run.step_done("delete")
            run.advance(EditState.DONE)
            logger.info("edit.deleted", object=str(ref))
            return EditOutcome(
                ref=ref,
                run=run,
                message=f"{ref.object_type} {ref.name} deleted",
            )
        except Exception:
            self._fail(run)
            raise

    async def _get(
        self,
        ref: ObjectRef,
        version: str,
        session_id: str | None,
        session_state: SessionState | None,
    ) -> EditOutcome:
        run = EditRun("get", ref)
        try:
            if version not in CHECK_VERSIONS:
                raise WorkflowError(
                    ErrorKind.BAD_REQUEST,
                    f"version must be 'active' or 'inactive', got {version!r}",
                    step="read",
                )
            await self._steps.open_session(session_id, session_state)
            content = await self._steps.call("read", self._ctx.client().read(ref, version=version))
            run.step_done("read")
            run.advance(EditState.DONE)
            return EditOutcome(ref=ref, run=run, content=content)
        except Exception:
            self._fail(run)
            raise

    # ------------------------------------------------------------------
    # Update variants
    # ------------------------------------------------------------------

    async def _update_source(self, request: UpdateRequest) -> EditOutcome:
        """lock → check(new source) → update → unlock → check(inactive) → [activate]."""
        ref = request.ref
        run = EditRun("update", ref)
        try:
            if request.source_code is None:
                raise WorkflowError(
                    ErrorKind.BAD_REQUEST,
                    f"source_code is required to update {ref.object_type}",
                    step="update",
                )
            self._require_transport(ref, request.package_name, request.transport_request)
            session_id = await self._steps.open_session(request.session_id, request.session_state)

            acquisition = await self._locks.lock(ref, session_id, self._steps.snapshot())
            run.advance(EditState.LOCKED)
            run.step_done("lock")
            await self._edit_under_lock(
                run,
                acquisition,
                {"source_code": request.source_code},
                transport_request=request.transport_request,
                check_source_first=True,
            )

            outcome = EditOutcome(ref=ref, run=run, session_id=session_id)
            outcome.check_warnings = await self._check_after_unlock(ref)
            await self._finish(run, outcome, request.activate)
            return outcome
        except Exception:
            self._fail(run)
            raise

    async def _update_metadata(self, request: UpdateRequest) -> EditOutcome:
        """validate(update) → lock → update → check → unlock → [activate]."""
        ref = request.ref
        run = EditRun("update", ref)
        try:
            self._require_transport(ref, request.package_name, request.transport_request)
            session_id = await self._steps.open_session(request.session_id, request.session_state)

            run.advance(EditState.VALIDATING)
            result = await self._steps.validate(
                ref,
                package_name=request.package_name,
                description=request.description,
                for_update=True,
            )
            if not result.valid:
                raise WorkflowError(
                    ErrorKind.BAD_REQUEST,
                    f"Validation of {ref} failed: {result.message or 'rejected'}",
                    step="validate",
                )
            run.step_done("validate")

            acquisition = await self._locks.lock(ref, session_id, self._steps.snapshot())
            run.advance(EditState.LOCKED)
            run.step_done("lock")
            await self._edit_under_lock(
                run,
                acquisition,
                self._metadata_payload(request),
                transport_request=request.transport_request,
                check_source_first=False,
            )

            outcome = EditOutcome(ref=ref, run=run, session_id=session_id)
            await self._finish(run, outcome, request.activate)
            return outcome
        except Exception:
            self._fail(run)
            raise

    # ------------------------------------------------------------------
    # Lock-held section
    # ------------------------------------------------------------------

    async def _edit_under_lock(
        self,
        run: EditRun,
        acquisition: LockAcquisition,
        payload: dict[str, Any],
        *,
        transport_request: str | None,
        check_source_first: bool,
    ) -> SessionState | None:
        """Run the steps that need the lock, then unlock.

        Any failure releases the lock before the error propagates.
        """
        try:
            if check_source_first:
                await self._steps.resume(acquisition)
                await self._steps.check(
                    acquisition.ref,
                    version="inactive",
                    source=payload.get("source_code"),
                    failure_prefix="New code check failed",
                )
                run.advance(EditState.CHECKED)
                run.step_done("check")

            run.advance(EditState.UPDATING)
            acquisition = await self._steps.update(
                acquisition, payload, transport_request=transport_request
            )
            run.step_done("update")

            if not check_source_first:
                await self._steps.check(acquisition.ref, version="inactive")
                run.advance(EditState.CHECKED)
                run.step_done("check")
        except Exception as exc:
            logger.warning(
                "edit.compensating",
                object=str(acquisition.ref),
                step=getattr(exc, "step", None),
                lock_handle=mask_token(acquisition.lock_handle),
            )
            await self._locks.release(acquisition, exc)
            raise

        try:
            state = await self._locks.unlock(acquisition)
        except Exception:
            logger.error(
                "edit.unlock_failed",
                object=str(acquisition.ref),
                lock_handle=mask_token(acquisition.lock_handle),
            )
            await self._locks.force_release(acquisition.ref)
            raise
        run.advance(EditState.UNLOCKED)
        run.step_done("unlock")
        return state

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _check_after_unlock(self, ref: ObjectRef) -> list[str]:
        """Non-fatal check of the inactive version; failures become warnings."""
        try:
            await self._steps.check(ref, version="inactive")
        except WorkflowError as exc:
            logger.warning("edit.post_check_failed", object=str(ref), error=exc.message)
            return [exc.message]
        return []

    async def _finish(self, run: EditRun, outcome: EditOutcome, activate: bool | None) -> None:
        if activate is None:
            activate = self._descriptor.default_activate
        if activate:
            run.advance(EditState.ACTIVATING)
            result = await self._steps.activate(outcome.ref)
            run.step_done("activate")
            outcome.activated = True
            outcome.activation_warnings = [m.text for m in result.warnings]
        run.advance(EditState.DONE)
        outcome.session_state = self._steps.snapshot()
        logger.info(
            "edit.done",
            object=str(outcome.ref),
            operation=run.operation,
            activated=outcome.activated,
            steps=run.steps_completed,
        )

    def _require_transport(
        self,
        ref: ObjectRef,
        package_name: str | None,
        transport_request: str | None,
    ) -> None:
        if transport_request:
            return
        if self._descriptor.needs_transport(ref, package_name):
            raise WorkflowError(
                ErrorKind.BAD_REQUEST,
                f"transport_request is required for {ref} in non-local package {package_name}",
                step="validate",
            )

    def _create_payload(self, request: CreateRequest) -> dict[str, Any] | None:
        if self._descriptor.name_assigned_on_create:
            return None
        if self._descriptor.update_style is UpdateStyle.SOURCE:
            if request.source_code is None:
                return None
            return {"source_code": request.source_code}
        if not request.properties:
            return None
        return self._metadata_payload(request)

    @staticmethod
    def _metadata_payload(request: CreateRequest | UpdateRequest) -> dict[str, Any]:
        payload = dict(request.properties)
        if request.description is not None:
            payload.setdefault("description", request.description)
        if request.package_name is not None:
            payload.setdefault("package_name", request.package_name)
        return payload

    @staticmethod
    def _fail(run: EditRun) -> None:
        run.fail()
        logger.warning(
            "edit.failed",
            object=str(run.ref),
            operation=run.operation,
            history=[f"{a.value}->{b.value}" for a, b in run.history],
        )


__all__ = ["CreateRequest", "EditOutcome", "EditSaga", "UpdateRequest"]
