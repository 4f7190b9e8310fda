"""ErrorKind — the small failure taxonomy sagas branch on."""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Classified failure kinds.

    The value doubles as the ``error_kind`` field of an error envelope.
    """

    NOT_FOUND = "not_found"
    LOCKED = "locked"
    ALREADY_EXISTS = "already_exists"
    BAD_REQUEST = "bad_request"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    UNKNOWN = "unknown"


__all__ = ["ErrorKind"]
