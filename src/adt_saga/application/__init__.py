"""Application – edit sagas and the capability router in front of them."""

from adt_saga.application.routing import (
    CAPABILITY_MATRIX,
    DEFAULT_ROUTER,
    CapabilityMatrix,
    CapabilityRouter,
    capabilities,
    invoke,
)
from adt_saga.application.saga import (
    ConnectionContinuity,
    EditSaga,
    LockSaga,
    WorkflowContext,
)

__all__ = [
    "CAPABILITY_MATRIX",
    "DEFAULT_ROUTER",
    "CapabilityMatrix",
    "CapabilityRouter",
    "ConnectionContinuity",
    "EditSaga",
    "LockSaga",
    "WorkflowContext",
    "capabilities",
    "invoke",
]
