"""Application routing – the object-type descriptors the default router serves."""

from __future__ import annotations

from adt_saga.application.saga.descriptor import ObjectTypeDescriptor, UpdateStyle
from adt_saga.kernel.types.operations import CRUD_OPERATIONS, LIFECYCLE_OPERATIONS, Operation


def _source(tag: str, name_field: str, **kwargs: object) -> ObjectTypeDescriptor:
    return ObjectTypeDescriptor(
        tag=tag,
        name_field=name_field,
        crud=CRUD_OPERATIONS,
        lifecycle=LIFECYCLE_OPERATIONS,
        **kwargs,  # type: ignore[arg-type]
    )


def _metadata(tag: str, name_field: str, **kwargs: object) -> ObjectTypeDescriptor:
    return _source(tag, name_field, update_style=UpdateStyle.METADATA, **kwargs)


DESCRIPTORS: tuple[ObjectTypeDescriptor, ...] = (
    ObjectTypeDescriptor(
        tag="PACKAGE",
        name_field="package_name",
        package_field="super_package",
        crud=frozenset({Operation.CREATE, Operation.GET}),
        lifecycle=frozenset({Operation.VALIDATE}),
        update_style=UpdateStyle.METADATA,
        default_activate=False,
    ),
    _metadata("DOMAIN", "domain_name"),
    _metadata("DATA_ELEMENT", "data_element_name"),
    ObjectTypeDescriptor(
        tag="TRANSPORT",
        name_field="transport_request",
        crud=frozenset({Operation.CREATE}),
        update_style=UpdateStyle.METADATA,
        transportable=False,
        validates_on_create=False,
        default_activate=False,
        name_assigned_on_create=True,
    ),
    _source("TABLE", "table_name"),
    _source("STRUCTURE", "structure_name"),
    _source("VIEW", "view_name"),
    _source("SERVICE_DEFINITION", "service_definition_name"),
    _metadata("SERVICE_BINDING", "service_binding_name"),
    _source("CLASS", "class_name"),
    _source("PROGRAM", "program_name"),
    _source("INTERFACE", "interface_name"),
    _metadata("FUNCTION_GROUP", "function_group_name"),
    _source("FUNCTION_MODULE", "function_module_name", parent_field="function_group_name"),
    _source("BEHAVIOR_DEFINITION", "behavior_definition_name"),
    _source("BEHAVIOR_IMPLEMENTATION", "class_name"),
    _source("METADATA_EXTENSION", "metadata_extension_name"),
    ObjectTypeDescriptor(tag="RUNTIME_PROFILE", name_field="object_name", crud=frozenset()),
    ObjectTypeDescriptor(tag="RUNTIME_DUMP", name_field="object_name", crud=frozenset()),
)

DESCRIPTORS_BY_TAG: dict[str, ObjectTypeDescriptor] = {d.tag: d for d in DESCRIPTORS}


__all__ = ["DESCRIPTORS", "DESCRIPTORS_BY_TAG"]
