"""Application routing – CapabilityRouter."""

from __future__ import annotations

from typing import Any

import structlog

from adt_saga.application.routing.handlers import Handler
from adt_saga.application.routing.matrix import CapabilityMatrix
from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.descriptor import ObjectTypeDescriptor
from adt_saga.kernel.errors import CapabilityMismatchError, ErrorKind, UnsupportedOperationError
from adt_saga.kernel.types.envelope import ResponseEnvelope
from adt_saga.kernel.types.operations import Operation
from adt_saga.observability.logging import get_logger

logger = get_logger(__name__)


class CapabilityRouter:
    """Dispatches ``(object_type, operation)`` to a handler.

    ``route`` never raises: unknown pairs become ``unsupported_operation``
    envelopes and handler failures are classified into error envelopes.
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, ObjectTypeDescriptor] = {}
        self._routes: dict[str, dict[Operation, Handler]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        descriptor: ObjectTypeDescriptor,
        operation: Operation,
        handler: Handler,
    ) -> None:
        tag = descriptor.tag.upper()
        self._descriptors[tag] = descriptor
        self._routes.setdefault(tag, {})[operation] = handler

    def register_descriptor(
        self,
        descriptor: ObjectTypeDescriptor,
        handlers: dict[Operation, Handler],
    ) -> None:
        """Register every operation *descriptor* supports, using *handlers*."""
        tag = descriptor.tag.upper()
        self._descriptors[tag] = descriptor
        self._routes.setdefault(tag, {})
        for operation in descriptor.operations:
            self.register(descriptor, operation, handlers[operation])

    def unregister(self, object_type: str, operation: Operation) -> None:
        self._routes.get(object_type.upper(), {}).pop(operation, None)

    def object_types(self) -> frozenset[str]:
        return frozenset(self._routes)

    def registered_operations(self, object_type: str) -> frozenset[Operation]:
        return frozenset(self._routes.get(object_type.upper(), {}))

    def descriptor(self, object_type: str) -> ObjectTypeDescriptor | None:
        return self._descriptors.get(object_type.upper())

    def verify(self, matrix: CapabilityMatrix) -> None:
        """Raise :class:`CapabilityMismatchError` unless routes equal *matrix*.

        Compares per object type over the union of both tables' types.
        """
        for tag in sorted(self.object_types() | matrix.object_types()):
            declared = matrix.operations(tag)
            registered = self.registered_operations(tag)
            if declared != registered:
                raise CapabilityMismatchError(
                    tag,
                    [op.value for op in declared],
                    [op.value for op in registered],
                )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def route(
        self,
        ctx: WorkflowContext,
        object_type: str | None,
        operation: str | None,
        args: dict[str, Any] | None = None,
    ) -> ResponseEnvelope:
        tag = (object_type or "").strip().upper()
        if not tag:
            return ResponseEnvelope.fail("object_type is required", ErrorKind.BAD_REQUEST)

        op = Operation.parse(operation)
        handler = self._routes.get(tag, {}).get(op) if op is not None else None
        descriptor = self._descriptors.get(tag)
        if handler is None or descriptor is None:
            error = UnsupportedOperationError(tag, (operation or "").strip().lower())
            logger.info("route.unsupported", object_type=tag, operation=operation)
            return ResponseEnvelope.fail(error.message, error.kind)

        with structlog.contextvars.bound_contextvars(object_type=tag, operation=op.value):
            try:
                async with ctx.exclusive():
                    return await handler(ctx, descriptor, dict(args or {}))
            except Exception as exc:  # noqa: BLE001
                result = ctx.classifier.classify(exc)
                logger.warning(
                    "route.failed",
                    error_kind=result.kind.value,
                    error=result.message,
                    step=getattr(exc, "step", None),
                )
                return ResponseEnvelope.fail(result.message, result.kind)


__all__ = ["CapabilityRouter"]
