"""Application – edit sagas over a stateful, lock-protected repository."""

from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.continuity import ConnectionContinuity
from adt_saga.application.saga.descriptor import ObjectTypeDescriptor, UpdateStyle
from adt_saga.application.saga.edit import CreateRequest, EditOutcome, EditSaga, UpdateRequest
from adt_saga.application.saga.lock import LockSaga, classified_error, new_session_id
from adt_saga.application.saga.state import EditRun, EditState
from adt_saga.application.saga.steps import StepRunner
from adt_saga.application.saga.store import (
    InMemoryLockRegistry,
    JsonFileLockRegistry,
    LockRecord,
    LockRegistry,
)

__all__ = [
    "ConnectionContinuity",
    "CreateRequest",
    "EditOutcome",
    "EditRun",
    "EditSaga",
    "EditState",
    "InMemoryLockRegistry",
    "JsonFileLockRegistry",
    "LockRecord",
    "LockRegistry",
    "LockSaga",
    "ObjectTypeDescriptor",
    "StepRunner",
    "UpdateRequest",
    "UpdateStyle",
    "WorkflowContext",
    "classified_error",
    "new_session_id",
]
