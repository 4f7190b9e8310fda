"""Application saga – ObjectTypeDescriptor: per-type behaviour as data."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from adt_saga.kernel.types.operations import Operation
from adt_saga.kernel.types.refs import ObjectRef


class UpdateStyle(str, enum.Enum):
    """How an object type's content is edited."""

    SOURCE = "source"
    """Edited as source text; new source is syntax-checked before writing."""

    METADATA = "metadata"
    """Edited as properties; update runs an update-style validation first."""


@dataclass(frozen=True)
class ObjectTypeDescriptor:
    """Everything the generic saga needs to know about one object type.

    Args:
        tag: Upper-case object type, e.g. ``CLASS``.
        name_field: Argument carrying the object name, e.g. ``class_name``.
        crud: Supported CRUD operation names.
        lifecycle: Supported step operation names.
        update_style: Source- or metadata-based editing.
        parent_field: Argument naming the containing object, if any.
        package_field: Argument naming the target package.
        transportable: Whether changes need a transport request outside
            local (``$``) packages.
        validates_on_create: Whether create starts with a name validation.
        default_activate: Activation default when the caller does not say.
        name_assigned_on_create: The server picks the name on create (transport
            requests); the caller may omit it.
    """

    tag: str
    name_field: str
    crud: frozenset[Operation]
    lifecycle: frozenset[Operation] = frozenset()
    update_style: UpdateStyle = UpdateStyle.SOURCE
    parent_field: str | None = None
    package_field: str = "package_name"
    transportable: bool = True
    validates_on_create: bool = True
    default_activate: bool = True
    name_assigned_on_create: bool = False

    @property
    def operations(self) -> frozenset[Operation]:
        return self.crud | self.lifecycle

    def needs_transport(self, ref: ObjectRef, package_name: str | None) -> bool:
        """True when editing *ref* in *package_name* must name a transport request."""
        if not self.transportable:
            return False
        if self.tag == "PACKAGE" and ref.name.startswith("$"):
            return False
        if package_name is None:
            return False
        return not package_name.startswith("$")


__all__ = ["ObjectTypeDescriptor", "UpdateStyle"]
