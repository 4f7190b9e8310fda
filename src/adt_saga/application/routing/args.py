"""Application routing – argument parsing shared by the handlers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from adt_saga.application.saga.descriptor import ObjectTypeDescriptor
from adt_saga.kernel.errors import ErrorKind, WorkflowError
from adt_saga.kernel.types.refs import ObjectRef
from adt_saga.kernel.types.session import LockAcquisition, SessionState

#: Placeholder name for objects whose name the server assigns on create.
ASSIGNED_NAME = "NEW"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def bad_request(message: str) -> WorkflowError:
    return WorkflowError(ErrorKind.BAD_REQUEST, message, step="arguments")


def optional_str(args: Mapping[str, Any], key: str, *, upper: bool = False) -> str | None:
    value = args.get(key)
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text.upper() if upper else text


def required_str(args: Mapping[str, Any], key: str, *, upper: bool = False) -> str:
    value = optional_str(args, key, upper=upper)
    if value is None:
        raise bad_request(f"{key} is required")
    return value


def flag(args: Mapping[str, Any], key: str) -> bool | None:
    """Parse an optional boolean that may arrive as bool, int or string."""
    value = args.get(key)
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise bad_request(f"{key} must be a boolean, got {value!r}")


def object_ref(
    descriptor: ObjectTypeDescriptor,
    args: Mapping[str, Any],
    *,
    creating: bool = False,
) -> ObjectRef:
    """Build the :class:`ObjectRef` from the type's name field (or ``object_name``)."""
    name = optional_str(args, descriptor.name_field, upper=True) or optional_str(
        args, "object_name", upper=True
    )
    if name is None:
        if creating and descriptor.name_assigned_on_create:
            name = ASSIGNED_NAME
        else:
            raise bad_request(f"{descriptor.name_field} is required")
    parent: str | None = None
    if descriptor.parent_field is not None:
        parent = required_str(args, descriptor.parent_field, upper=True)
    return ObjectRef(descriptor.tag, name, parent)


def session_state(args: Mapping[str, Any]) -> SessionState | None:
    raw = args.get("session_state")
    if raw is None or isinstance(raw, SessionState):
        return raw
    if not isinstance(raw, Mapping):
        raise bad_request("session_state must be an object")
    store = raw.get("cookie_store", raw.get("cookieStore"))
    if store is not None and not isinstance(store, Mapping):
        raise bad_request("session_state.cookie_store must be an object")
    for key in ("cookies", "csrf_token", "csrfToken"):
        if raw.get(key) is not None and not isinstance(raw[key], str):
            raise bad_request(f"session_state.{key} must be a string")
    return SessionState.from_dict(raw)


def session(args: Mapping[str, Any]) -> tuple[str | None, SessionState | None]:
    return optional_str(args, "session_id"), session_state(args)


def package_name(descriptor: ObjectTypeDescriptor, args: Mapping[str, Any]) -> str | None:
    return optional_str(args, descriptor.package_field, upper=True)


def source_code(args: Mapping[str, Any]) -> str | None:
    value = args.get("source_code")
    if value is None:
        return None
    if not isinstance(value, str):
        raise bad_request("source_code must be a string")
    return value


def properties(args: Mapping[str, Any]) -> dict[str, Any]:
    value = args.get("properties") or {}
    if not isinstance(value, Mapping):
        raise bad_request("properties must be an object")
    return dict(value)


def acquisition(descriptor: ObjectTypeDescriptor, args: Mapping[str, Any]) -> LockAcquisition:
    """Rebuild the :class:`LockAcquisition` a caller got back from ``lock``."""
    ref = object_ref(descriptor, args)
    handle = required_str(args, "lock_handle")
    session_id = required_str(args, "session_id")
    return LockAcquisition(
        ref=ref,
        lock_handle=handle,
        session_id=session_id,
        session_state=session_state(args),
    )


__all__ = [
    "ASSIGNED_NAME",
    "bad_request",
    "acquisition",
    "flag",
    "object_ref",
    "optional_str",
    "package_name",
    "properties",
    "required_str",
    "session",
    "session_state",
    "source_code",
]
