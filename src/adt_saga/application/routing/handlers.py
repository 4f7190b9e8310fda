"""Application routing – generic operation handlers.

Every handler has the same shape, ``(ctx, descriptor, args) -> ResponseEnvelope``,
and works for any object type: the descriptor supplies the per-type data.
Handlers raise on failure; the router turns exceptions into error envelopes.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from adt_saga.application.routing import args as parse
from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.descriptor import ObjectTypeDescriptor
from adt_saga.application.saga.edit import CreateRequest, EditSaga, UpdateRequest
from adt_saga.application.saga.lock import LockSaga
from adt_saga.application.saga.steps import StepRunner
from adt_saga.kernel.types.envelope import ResponseEnvelope
from adt_saga.kernel.types.operations import Operation
from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.session import SessionState

#: Signature shared by every registered handler.
Handler = Callable[[WorkflowContext, ObjectTypeDescriptor, dict[str, Any]], Awaitable[ResponseEnvelope]]


def _session_data(ref: ObjectRef, session_id: str, state: SessionState | None) -> dict[str, Any]:
    return {
        "name": ref.name,
        "object_type": ref.object_type,
        "session_id": session_id,
        "session_state": state.to_dict() if state else None,
    }


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def handle_create(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    session_id, state = parse.session(args)
    request = CreateRequest(
        ref=parse.object_ref(descriptor, args, creating=True),
        package_name=parse.package_name(descriptor, args),
        description=parse.optional_str(args, "description"),
        transport_request=parse.optional_str(args, "transport_request", upper=True),
        source_code=parse.source_code(args),
        properties=parse.properties(args),
        activate=parse.flag(args, "activate"),
        session_id=session_id,
        session_state=state,
    )
    outcome = await EditSaga(ctx, descriptor).create(request)
    return ResponseEnvelope.ok(outcome.to_data())


async def handle_get(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    session_id, state = parse.session(args)
    outcome = await EditSaga(ctx, descriptor).get(
        parse.object_ref(descriptor, args),
        version=parse.optional_str(args, "version") or "active",
        session_id=session_id,
        session_state=state,
    )
    return ResponseEnvelope.ok(outcome.to_data())


async def handle_update(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    """Full update saga, or a single update step when ``lock_handle`` is given."""
    if parse.optional_str(args, "lock_handle") is not None:
        return await _update_step(ctx, descriptor, args)
    session_id, state = parse.session(args)
    request = UpdateRequest(
        ref=parse.object_ref(descriptor, args),
        source_code=parse.source_code(args),
        properties=parse.properties(args),
        package_name=parse.package_name(descriptor, args),
        description=parse.optional_str(args, "description"),
        transport_request=parse.optional_str(args, "transport_request", upper=True),
        activate=parse.flag(args, "activate"),
        session_id=session_id,
        session_state=state,
    )
    outcome = await EditSaga(ctx, descriptor).update(request)
    return ResponseEnvelope.ok(outcome.to_data())


async def _update_step(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    acquisition = parse.acquisition(descriptor, args)
    source = parse.source_code(args)
    payload: dict[str, Any] = {"source_code": source} if source is not None else parse.properties(args)
    if not payload:
        raise parse.bad_request("source_code or properties is required")
    updated = await StepRunner(ctx).update(
        acquisition,
        payload,
        transport_request=parse.optional_str(args, "transport_request", upper=True),
    )
    data = _session_data(updated.ref, updated.session_id, updated.session_state)
    data["lock_handle"] = updated.lock_handle
    data["updated"] = True
    return ResponseEnvelope.ok(data)


async def handle_delete(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    session_id, state = parse.session(args)
    outcome = await EditSaga(ctx, descriptor).delete(
        parse.object_ref(descriptor, args),
        transport_request=parse.optional_str(args, "transport_request", upper=True),
        session_id=session_id,
        session_state=state,
    )
    return ResponseEnvelope.ok(outcome.to_data())


# ---------------------------------------------------------------------------
# Lifecycle steps
# ---------------------------------------------------------------------------


async def handle_validate(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    ref = parse.object_ref(descriptor, args)
    steps = StepRunner(ctx)
    session_id = await steps.open_session(*parse.session(args))
    result = await steps.validate(
        ref,
        package_name=parse.package_name(descriptor, args),
        description=parse.optional_str(args, "description"),
        for_update=bool(parse.flag(args, "for_update")),
    )
    data = _session_data(ref, session_id, steps.snapshot())
    data.update(result.to_dict())
    return ResponseEnvelope.ok(data)


async def handle_lock(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    ref = parse.object_ref(descriptor, args)
    acquisition = await LockSaga(ctx).lock(ref, *parse.session(args))
    data = _session_data(ref, acquisition.session_id, acquisition.session_state)
    data["lock_handle"] = acquisition.lock_handle
    return ResponseEnvelope.ok(data)


async def handle_unlock(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    acquisition = parse.acquisition(descriptor, args)
    state = await LockSaga(ctx).unlock(acquisition)
    data = _session_data(acquisition.ref, acquisition.session_id, state)
    data["unlocked"] = True
    return ResponseEnvelope.ok(data)


async def handle_check(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    ref = parse.object_ref(descriptor, args)
    steps = StepRunner(ctx)
    session_id = await steps.open_session(*parse.session(args))
    version = parse.optional_str(args, "version") or "inactive"
    result = await steps.check(ref, version=version, source=parse.source_code(args))
    data = _session_data(ref, session_id, steps.snapshot())
    data.update(
        version=version,
        passed=result.passed,
        messages=[m.to_dict() for m in result.messages],
    )
    return ResponseEnvelope.ok(data)


async def handle_activate(
    ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]
) -> ResponseEnvelope:
    ref = parse.object_ref(descriptor, args)
    steps = StepRunner(ctx)
    session_id = await steps.open_session(*parse.session(args))
    result = await steps.activate(ref)
    data = _session_data(ref, session_id, steps.snapshot())
    data.update(
        activated=result.activated,
        checked=result.checked,
        generated=result.generated,
        activation_warnings=[m.text for m in result.warnings],
    )
    return ResponseEnvelope.ok(data)


HANDLERS: dict[Operation, Handler] = {
    Operation.CREATE: handle_create,
    Operation.GET: handle_get,
    Operation.UPDATE: handle_update,
    Operation.DELETE: handle_delete,
    Operation.VALIDATE: handle_validate,
    Operation.LOCK: handle_lock,
    Operation.UNLOCK: handle_unlock,
    Operation.CHECK: handle_check,
    Operation.ACTIVATE: handle_activate,
}


__all__ = [
    "HANDLERS",
    "Handler",
    "handle_activate",
    "handle_check",
    "handle_create",
    "handle_delete",
    "handle_get",
    "handle_lock",
    "handle_unlock",
    "handle_update",
    "handle_validate",
]
