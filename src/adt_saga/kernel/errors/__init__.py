"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   └── InvariantViolationError
    │       ├── SagaStateError
    │       └── CapabilityMismatchError
    ├── ApplicationError         (application.py)
    │   └── WorkflowError
    │       └── UnsupportedOperationError
    └── InfrastructureError      (infrastructure.py)
        └── TransportError
"""

from adt_saga.kernel.errors.application import (
    ApplicationError,
    UnsupportedOperationError,
    WorkflowError,
)
from adt_saga.kernel.errors.base import BaseError
from adt_saga.kernel.errors.classifier import (
    Classification,
    ErrorClassifier,
    Fault,
    classify,
    parse_fault,
)
from adt_saga.kernel.errors.domain import (
    CapabilityMismatchError,
    DomainError,
    InvariantViolationError,
    SagaStateError,
)
from adt_saga.kernel.errors.infrastructure import InfrastructureError, TransportError
from adt_saga.kernel.errors.kinds import ErrorKind

__all__ = [
    "ApplicationError",
    "BaseError",
    "CapabilityMismatchError",
    "Classification",
    "DomainError",
    "ErrorClassifier",
    "ErrorKind",
    "Fault",
    "InfrastructureError",
    "InvariantViolationError",
    "SagaStateError",
    "TransportError",
    "UnsupportedOperationError",
    "WorkflowError",
    "classify",
    "parse_fault",
]
