"""Kernel – framework-agnostic building blocks: errors, value types, ports."""

from adt_saga.kernel.errors import (
    ApplicationError,
    BaseError,
    CapabilityMismatchError,
    DomainError,
    ErrorClassifier,
    ErrorKind,
    InfrastructureError,
    InvariantViolationError,
    SagaStateError,
    TransportError,
    UnsupportedOperationError,
    WorkflowError,
)
from adt_saga.kernel.types import (
    LockAcquisition,
    ObjectRef,
    ResponseEnvelope,
    SessionState,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "CapabilityMismatchError",
    "DomainError",
    "ErrorClassifier",
    "ErrorKind",
    "InfrastructureError",
    "InvariantViolationError",
    "LockAcquisition",
    "ObjectRef",
    "ResponseEnvelope",
    "SagaStateError",
    "SessionState",
    "TransportError",
    "UnsupportedOperationError",
    "WorkflowError",
]
