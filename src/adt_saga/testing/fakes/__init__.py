"""Testing fakes – in-memory doubles for the connection and client ports."""
from adt_saga.kernel.time import FrozenClock
from adt_saga.testing.fakes.adt import (
    FakeAdtClient,
    FakeAdtConnection,
    InMemoryAdtRepository,
    RecordedCall,
    StoredObject,
    fault_xml,
    http_error,
)

__all__ = [
    "FakeAdtClient",
    "FakeAdtConnection",
    "FrozenClock",
    "InMemoryAdtRepository",
    "RecordedCall",
    "StoredObject",
    "fault_xml",
    "http_error",
]
