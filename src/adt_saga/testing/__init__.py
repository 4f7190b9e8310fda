"""Testing support – fakes and pytest fixtures.

Import in your ``conftest.py``::

    pytest_plugins = ["adt_saga.testing.fixtures"]
"""

from adt_saga.testing.fakes import (
    FakeAdtClient,
    FakeAdtConnection,
    FrozenClock,
    InMemoryAdtRepository,
    RecordedCall,
    fault_xml,
    http_error,
)

__all__ = [
    "FakeAdtClient",
    "FakeAdtConnection",
    "FrozenClock",
    "InMemoryAdtRepository",
    "RecordedCall",
    "fault_xml",
    "http_error",
]
