"""Shared fixtures: the fake repository server and a context wired to it."""

from adt_saga.testing.fixtures import (  # noqa: F401
    adt_repository,
    fake_connection,
    frozen_clock,
    lock_registry,
    workflow_context,
)
