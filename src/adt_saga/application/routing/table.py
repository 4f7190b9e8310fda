"""Application routing – the default router, verified when this module loads.

A router that disagrees with :data:`CAPABILITY_MATRIX` raises
:class:`~adt_saga.kernel.errors.CapabilityMismatchError` here, so the
process fails before it can serve a single call.
"""

from __future__ import annotations

from collections.abc import Iterable

from adt_saga.application.routing.descriptors import DESCRIPTORS
from adt_saga.application.routing.handlers import HANDLERS, Handler
from adt_saga.application.routing.matrix import CAPABILITY_MATRIX, CapabilityMatrix
from adt_saga.application.routing.router import CapabilityRouter
from adt_saga.application.saga.descriptor import ObjectTypeDescriptor
from adt_saga.kernel.types.operations import Operation


def build_router(
    descriptors: Iterable[ObjectTypeDescriptor] = DESCRIPTORS,
    handlers: dict[Operation, Handler] | None = None,
) -> CapabilityRouter:
    router = CapabilityRouter()
    for descriptor in descriptors:
        router.register_descriptor(descriptor, handlers or HANDLERS)
    return router


def verified_router(
    matrix: CapabilityMatrix = CAPABILITY_MATRIX,
    descriptors: Iterable[ObjectTypeDescriptor] = DESCRIPTORS,
) -> CapabilityRouter:
    router = build_router(descriptors)
    router.verify(matrix)
    return router


DEFAULT_ROUTER: CapabilityRouter = verified_router()


__all__ = ["DEFAULT_ROUTER", "build_router", "verified_router"]
