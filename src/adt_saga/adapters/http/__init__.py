"""HTTP adapter – stateful httpx connection to the repository server."""
from adt_saga.adapters.http.connection import DISCOVERY_PATH, HttpxAdtConnection

__all__ = ["DISCOVERY_PATH", "HttpxAdtConnection"]
