"""Testing fixtures – pytest fixtures for the fake server and a ready context.

Register them in your ``conftest.py``::

    pytest_plugins = ["adt_saga.testing.fixtures"]
"""
from adt_saga.testing.fixtures.adt import (
    adt_repository,
    fake_connection,
    frozen_clock,
    lock_registry,
    workflow_context,
)

__all__ = [
    "adt_repository",
    "fake_connection",
    "frozen_clock",
    "lock_registry",
    "workflow_context",
]
