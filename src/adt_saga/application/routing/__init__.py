"""Application – routing of ``(object_type, operation)`` calls to the sagas."""

from __future__ import annotations

from typing import Any

from adt_saga.application.routing.descriptors import DESCRIPTORS, DESCRIPTORS_BY_TAG
from adt_saga.application.routing.handlers import HANDLERS, Handler
from adt_saga.application.routing.matrix import CAPABILITY_MATRIX, CapabilityMatrix
from adt_saga.application.routing.router import CapabilityRouter
from adt_saga.application.routing.table import DEFAULT_ROUTER, build_router, verified_router
from adt_saga.application.saga.context import WorkflowContext


async def invoke(
    ctx: WorkflowContext,
    object_type: str,
    operation: str,
    args: dict[str, Any] | None = None,
    *,
    router: CapabilityRouter | None = None,
) -> dict[str, Any]:
    """Route one call and return the envelope as a plain dict.

    Example::

        result = await invoke(ctx, "class", "update", {"class_name": "ZCL_DEMO", ...})
        if not result["success"]:
            print(result["error_kind"], result["error_message"])
    """
    envelope = await (router or DEFAULT_ROUTER).route(ctx, object_type, operation, args)
    return envelope.to_dict()


def capabilities(matrix: CapabilityMatrix = CAPABILITY_MATRIX) -> dict[str, list[str]]:
    """Supported operations per object type, for discovery."""
    return matrix.to_dict()


__all__ = [
    "CAPABILITY_MATRIX",
    "DEFAULT_ROUTER",
    "DESCRIPTORS",
    "DESCRIPTORS_BY_TAG",
    "HANDLERS",
    "CapabilityMatrix",
    "CapabilityRouter",
    "Handler",
    "build_router",
    "capabilities",
    "invoke",
    "verified_router",
]
