"""Domain errors — broken invariants of sagas and the capability model."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from adt_saga.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule / invariant is violated."""

    default_code = "domain_error"


class InvariantViolationError(DomainError):
    """An internal invariant was violated."""

    default_code = "invariant_violation"


class SagaStateError(InvariantViolationError):
    """A saga attempted a transition its state machine does not allow."""

    default_code = "saga_state_error"

    def __init__(self, current: str, target: str, **kwargs: Any) -> None:
        super().__init__(f"Illegal saga transition {current} -> {target}", **kwargs)
        self.current = current
        self.target = target


class CapabilityMismatchError(InvariantViolationError):
    """The live dispatch table disagrees with the declared capability matrix."""

    default_code = "capability_mismatch"

    def __init__(
        self,
        object_type: str,
        declared: Iterable[str],
        registered: Iterable[str],
        **kwargs: Any,
    ) -> None:
        declared_ops = sorted(declared)
        registered_ops = sorted(registered)
        difference = sorted(set(declared_ops) ^ set(registered_ops))
        super().__init__(
            f"Router mismatch for {object_type}. "
            f"Declared: [{', '.join(declared_ops)}], "
            f"registered: [{', '.join(registered_ops)}], "
            f"difference: [{', '.join(difference)}]",
            detail={
                "object_type": object_type,
                "declared": declared_ops,
                "registered": registered_ops,
                "difference": difference,
            },
            **kwargs,
        )
        self.object_type = object_type
        self.declared = frozenset(declared_ops)
        self.registered = frozenset(registered_ops)
        self.difference = frozenset(difference)


__all__ = [
    "CapabilityMismatchError",
    "DomainError",
    "InvariantViolationError",
    "SagaStateError",
]
