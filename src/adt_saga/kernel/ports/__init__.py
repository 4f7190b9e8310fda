"""Kernel ports — what the sagas need from the outside world."""

from adt_saga.kernel.ports.adt import AdtClient, AdtConnection, ClientFactory

__all__ = ["AdtClient", "AdtConnection", "ClientFactory"]
