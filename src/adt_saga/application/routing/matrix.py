"""Application routing – CapabilityMatrix: which operations each object type supports."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from adt_saga.kernel.types.operations import CRUD_OPERATIONS, LIFECYCLE_OPERATIONS, Operation


class CapabilityMatrix:
    """Immutable ``object_type → operations`` table.

    The declared table is the single source of truth: the router verifies
    its own registrations against it at import time.
    """

    def __init__(self, entries: Mapping[str, Iterable[Operation]]) -> None:
        self._entries: dict[str, frozenset[Operation]] = {
            tag.upper(): frozenset(ops) for tag, ops in entries.items()
        }

    def object_types(self) -> frozenset[str]:
        return frozenset(self._entries)

    def operations(self, object_type: str) -> frozenset[Operation]:
        return self._entries.get(object_type.upper(), frozenset())

    def supports(self, object_type: str, operation: Operation) -> bool:
        return operation in self.operations(object_type)

    def with_entry(self, object_type: str, operations: Iterable[Operation]) -> CapabilityMatrix:
        """Return a copy with *object_type* declared as *operations*."""
        entries = dict(self._entries)
        entries[object_type.upper()] = frozenset(operations)
        return CapabilityMatrix(entries)

    def to_dict(self) -> dict[str, list[str]]:
        """``{tag: [op, ...]}`` with CRUD first, then lifecycle steps, for discovery."""
        order = list(Operation)
        return {
            tag: [op.value for op in sorted(ops, key=order.index)]
            for tag, ops in sorted(self._entries.items())
        }

    def __contains__(self, object_type: object) -> bool:
        return isinstance(object_type, str) and object_type.upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CapabilityMatrix({len(self._entries)} object types)"


_FULL = CRUD_OPERATIONS | LIFECYCLE_OPERATIONS

CAPABILITY_MATRIX = CapabilityMatrix(
    {
        "PACKAGE": {Operation.CREATE, Operation.GET, Operation.VALIDATE},
        "DOMAIN": _FULL,
        "DATA_ELEMENT": _FULL,
        "TRANSPORT": {Operation.CREATE},
        "TABLE": _FULL,
        "STRUCTURE": _FULL,
        "VIEW": _FULL,
        "SERVICE_DEFINITION": _FULL,
        "SERVICE_BINDING": _FULL,
        "CLASS": _FULL,
        "PROGRAM": _FULL,
        "INTERFACE": _FULL,
        "FUNCTION_GROUP": _FULL,
        "FUNCTION_MODULE": _FULL,
        "BEHAVIOR_DEFINITION": _FULL,
        "BEHAVIOR_IMPLEMENTATION": _FULL,
        "METADATA_EXTENSION": _FULL,
        "RUNTIME_PROFILE": set(),
        "RUNTIME_DUMP": set(),
    }
)


__all__ = ["CAPABILITY_MATRIX", "CapabilityMatrix"]
