"""Observability – structured logging helpers."""
from adt_saga.observability.logging.factory import JsonLoggerFactory
from adt_saga.observability.logging.filters import (
    DEFAULT_SENSITIVE_FIELDS,
    SensitiveFieldsFilter,
    mask_token,
)
from adt_saga.observability.logging.processors import RedactionProcessor, get_logger

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "RedactionProcessor",
    "SensitiveFieldsFilter",
    "get_logger",
    "mask_token",
]
