"""Walk a class through create, a step-by-step edit and delete.

Runs against the in-memory fake server, so no system is needed::

    python docs/examples/edit_class.py
"""
from __future__ import annotations

import asyncio
import json

from adt_saga.application.routing import capabilities, invoke
from adt_saga.application.saga import InMemoryLockRegistry, WorkflowContext
from adt_saga.observability.logging import JsonLoggerFactory
from adt_saga.testing import FakeAdtClient, FakeAdtConnection, InMemoryAdtRepository

SOURCE = "CLASS zcl_demo DEFINITION PUBLIC. ENDCLASS. CLASS zcl_demo IMPLEMENTATION. ENDCLASS."


async def main() -> None:
    JsonLoggerFactory.configure("INFO")
    repository = InMemoryAdtRepository()
    async with WorkflowContext(
        FakeAdtConnection(repository),
        FakeAdtClient,
        lock_registry=InMemoryLockRegistry(),
    ) as ctx:
        print(json.dumps(capabilities()["CLASS"]))

        created = await invoke(
            ctx,
            "CLASS",
            "create",
            {"class_name": "ZCL_DEMO", "package_name": "$TMP", "source_code": SOURCE},
        )
        print(json.dumps(created, indent=2))

        locked = await invoke(ctx, "CLASS", "lock", {"class_name": "ZCL_DEMO"})
        session = {
            "class_name": "ZCL_DEMO",
            "lock_handle": locked["data"]["lock_handle"],
            "session_id": locked["data"]["session_id"],
            "session_state": locked["data"]["session_state"],
        }
        updated = await invoke(ctx, "CLASS", "update", {**session, "source_code": SOURCE + " "})
        session["session_state"] = updated["data"]["session_state"]
        print(json.dumps(await invoke(ctx, "CLASS", "unlock", session), indent=2))

        print(json.dumps(await invoke(ctx, "CLASS", "delete", {"class_name": "ZCL_DEMO"}), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
