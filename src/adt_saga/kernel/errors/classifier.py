"""ErrorClassifier — maps transport failures onto :class:`ErrorKind`.

Rule precedence:

1. an already-classified :class:`WorkflowError` keeps its kind;
2. an explicit HTTP-like status (404, 409/423, 400) wins over the body;
3. otherwise the structured fault body is parsed (ADT ``exc:exception`` XML
   or a dict with ``type``/``message``) and mapped by exception type, then by
   message keywords;
4. anything left is ``unknown``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from adt_saga.kernel.errors.application import WorkflowError
from adt_saga.kernel.errors.kinds import ErrorKind

_MAX_MESSAGE_LENGTH = 2000

_STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.BAD_REQUEST,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.LOCKED,
    423: ErrorKind.LOCKED,
}

_EXCEPTION_TYPE_KINDS: dict[str, ErrorKind] = {
    "ExceptionResourceNotFound": ErrorKind.NOT_FOUND,
    "ExceptionResourceAlreadyExists": ErrorKind.ALREADY_EXISTS,
    "ExceptionResourceNoAccess": ErrorKind.LOCKED,
    "ExceptionResourceLocked": ErrorKind.LOCKED,
    "ExceptionInvalidLockHandle": ErrorKind.BAD_REQUEST,
    "ExceptionInvalidData": ErrorKind.BAD_REQUEST,
    "ExceptionBadRequest": ErrorKind.BAD_REQUEST,
}

_ALREADY_EXISTS_MARKERS = (
    "already exists",
    "does already exist",
)
_ALREADY_CHECKED_MARKERS = (
    "has been checked",
    "was checked",
    "already checked",
)
_NOT_FOUND_MARKERS = ("not found", "does not exist")
_LOCKED_MARKERS = ("locked", "enqueue")
_BAD_REQUEST_MARKERS = ("invalid lock handle", "lock handle", "syntax error")


@dataclass(frozen=True)
class Fault:
    """Structured fault parsed from a response body."""

    exception_type: str | None
    message: str | None


@dataclass(frozen=True)
class Classification:
    """Result of :meth:`ErrorClassifier.classify`."""

    kind: ErrorKind
    message: str
    status_code: int | None = None
    exception_type: str | None = None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_xml_fault(body: str) -> Fault | None:
    try:
        root = ET.fromstring(body)
    except (ET.ParseError, DefusedXmlException):
        return None
    if _local_name(root.tag) != "exception":
        return None
    exception_type: str | None = None
    message: str | None = None
    localized: str | None = None
    for child in root:
        name = _local_name(child.tag)
        if name == "type":
            exception_type = child.get("id") or (child.text or "").strip() or None
        elif name == "message":
            message = (child.text or "").strip() or None
        elif name == "localizedMessage":
            localized = (child.text or "").strip() or None
    return Fault(exception_type=exception_type, message=localized or message)


def _parse_mapping_fault(body: dict[str, Any]) -> Fault | None:
    exception_type = body.get("type") or body.get("exception_type")
    message = body.get("localizedMessage") or body.get("message")
    if exception_type is None and message is None:
        return None
    return Fault(
        exception_type=str(exception_type) if exception_type is not None else None,
        message=str(message) if message is not None else None,
    )


def parse_fault(body: str | dict[str, Any] | None) -> Fault | None:
    """Extract the exception type and message from a fault body."""
    if body is None:
        return None
    if isinstance(body, dict):
        return _parse_mapping_fault(body)
    text = body.strip()
    if not text:
        return None
    if text.startswith("<"):
        return _parse_xml_fault(text)
    if text.startswith("{"):
        try:
            decoded = json.loads(text)
        except ValueError:
            return None
        if isinstance(decoded, dict):
            return _parse_mapping_fault(decoded)
    return None


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def _kind_from_exception_type(exception_type: str | None) -> ErrorKind | None:
    if not exception_type:
        return None
    kind = _EXCEPTION_TYPE_KINDS.get(exception_type)
    if kind is not None:
        return kind
    if "AlreadyExists" in exception_type:
        return ErrorKind.ALREADY_EXISTS
    if "NotFound" in exception_type:
        return ErrorKind.NOT_FOUND
    return None


def _kind_from_text(text: str) -> ErrorKind:
    if _contains_any(text, _ALREADY_EXISTS_MARKERS):
        return ErrorKind.ALREADY_EXISTS
    if _contains_any(text, _BAD_REQUEST_MARKERS):
        return ErrorKind.BAD_REQUEST
    if _contains_any(text, _NOT_FOUND_MARKERS):
        return ErrorKind.NOT_FOUND
    if _contains_any(text, _LOCKED_MARKERS):
        return ErrorKind.LOCKED
    return ErrorKind.UNKNOWN


def _raw_text(body: str | dict[str, Any] | None) -> str | None:
    if body is None:
        return None
    if isinstance(body, dict):
        return json.dumps(body, ensure_ascii=False, default=str)[:_MAX_MESSAGE_LENGTH]
    text = body.strip()
    return text[:_MAX_MESSAGE_LENGTH] or None


def _error_text(error: BaseException) -> str:
    return getattr(error, "message", None) or str(error) or type(error).__name__


class ErrorClassifier:
    """Assigns an :class:`ErrorKind` and a readable message to a failure."""

    def classify(self, error: BaseException) -> Classification:
        if isinstance(error, WorkflowError):
            return Classification(kind=error.kind, message=error.message)

        status_code: int | None = getattr(error, "status_code", None)
        raw_body = getattr(error, "raw_body", None)
        fault = parse_fault(raw_body)

        if fault is not None and fault.message:
            message = f"SAP error: {fault.message}"
        else:
            message = _raw_text(raw_body) or _error_text(error)

        exception_type = fault.exception_type if fault is not None else None

        if status_code in _STATUS_KINDS:
            kind = _STATUS_KINDS[status_code]
        else:
            kind = _kind_from_exception_type(exception_type) or _kind_from_text(
                " ".join(filter(None, [fault.message if fault else None, _raw_text(raw_body), _error_text(error)]))
            )

        return Classification(
            kind=kind,
            message=message,
            status_code=status_code,
            exception_type=exception_type,
        )

    def is_already_exists(self, error: BaseException) -> bool:
        """True when *error* says the object already exists, whatever its status."""
        if isinstance(error, WorkflowError):
            return error.kind is ErrorKind.ALREADY_EXISTS
        fault = parse_fault(getattr(error, "raw_body", None))
        if fault is not None and _kind_from_exception_type(fault.exception_type) is ErrorKind.ALREADY_EXISTS:
            return True
        text = " ".join(filter(None, [_raw_text(getattr(error, "raw_body", None)), _error_text(error)]))
        return _contains_any(text, _ALREADY_EXISTS_MARKERS)

    def is_already_checked(self, error: BaseException) -> bool:
        """True when a check failure only reports the object was checked before."""
        text = " ".join(filter(None, [_raw_text(getattr(error, "raw_body", None)), _error_text(error)]))
        return _contains_any(text, _ALREADY_CHECKED_MARKERS)


def classify(error: BaseException) -> Classification:
    """Module-level shortcut for :meth:`ErrorClassifier.classify`."""
    return ErrorClassifier().classify(error)


__all__ = [
    "Classification",
    "ErrorClassifier",
    "Fault",
    "classify",
    "parse_fault",
]
