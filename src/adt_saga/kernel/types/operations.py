"""Operation — the names callers route on."""

from __future__ import annotations

import enum


class Operation(str, enum.Enum):
    """CRUD operations plus the individual lifecycle steps."""

    CREATE = "create"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"
    VALIDATE = "validate"
    LOCK = "lock"
    UNLOCK = "unlock"
    CHECK = "check"
    ACTIVATE = "activate"

    @classmethod
    def parse(cls, name: str | None) -> Operation | None:
        """Case-insensitive lookup; ``None`` for unknown names."""
        if not name:
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


CRUD_OPERATIONS: frozenset[Operation] = frozenset(
    {Operation.CREATE, Operation.GET, Operation.UPDATE, Operation.DELETE}
)
LIFECYCLE_OPERATIONS: frozenset[Operation] = frozenset(
    {
        Operation.VALIDATE,
        Operation.LOCK,
        Operation.UNLOCK,
        Operation.CHECK,
        Operation.ACTIVATE,
    }
)


__all__ = ["CRUD_OPERATIONS", "LIFECYCLE_OPERATIONS", "Operation"]
