"""Kernel value types — public re-export surface.

Modules:
  refs.py       — ObjectRef
  session.py    — SessionState, LockAcquisition
  results.py    — ValidationResult, CheckResult, CheckMessage, ActivationResult
  envelope.py   — ResponseEnvelope
  operations.py — Operation, CRUD_OPERATIONS, LIFECYCLE_OPERATIONS
"""

from adt_saga.kernel.types.envelope import ResponseEnvelope
from adt_saga.kernel.types.operations import CRUD_OPERATIONS, LIFECYCLE_OPERATIONS, Operation
from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.results import (
    ActivationResult,
    CheckMessage,
    CheckResult,
    ValidationResult,
)
from adt_saga.kernel.types.session import LockAcquisition, SessionState

__all__ = [
    "ActivationResult",
    "CRUD_OPERATIONS",
    "CheckMessage",
    "CheckResult",
    "LIFECYCLE_OPERATIONS",
    "LockAcquisition",
    "ObjectRef",
    "Operation",
    "ResponseEnvelope",
    "SessionState",
    "ValidationResult",
]
