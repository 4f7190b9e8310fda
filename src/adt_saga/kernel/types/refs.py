"""ObjectRef — identifies a repository object."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ObjectRef:
    """``(object_type, name[, parent])`` of a repository object.

    ``parent`` is set for objects that live inside another one, e.g. the
    function group of a function module. Names are stored upper-cased.
    """

    object_type: str
    name: str
    parent: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("ObjectRef.name must not be empty")
        object.__setattr__(self, "object_type", self.object_type.upper())
        object.__setattr__(self, "name", self.name.strip().upper())
        if self.parent is not None:
            object.__setattr__(self, "parent", self.parent.strip().upper() or None)

    def __str__(self) -> str:
        if self.parent:
            return f"{self.object_type}:{self.parent}/{self.name}"
        return f"{self.object_type}:{self.name}"


__all__ = ["ObjectRef"]
