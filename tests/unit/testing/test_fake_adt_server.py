"""Unit tests for the in-memory fake server used throughout the suite."""

from __future__ import annotations

import asyncio

import pytest

from adt_saga.kernel.errors import ErrorKind, TransportError, classify
from adt_saga.kernel.types import ObjectRef
from adt_saga.testing import FakeAdtClient, FakeAdtConnection, InMemoryAdtRepository

REF = ObjectRef("CLASS", "ZCL_FAKE")


def _client(repo: InMemoryAdtRepository) -> tuple[FakeAdtConnection, FakeAdtClient]:
    connection = FakeAdtConnection(repo)
    return connection, FakeAdtClient(connection)


class TestFakeServerLocks:
    def test_handles_and_cookies_are_deterministic(self) -> None:
        repo = InMemoryAdtRepository(handle_start=5)
        repo.seed(REF)
        connection, client = _client(repo)

        async def run() -> None:
            await connection.connect()
            assert connection.cookies == "s1"
            assert await client.lock(REF) == "H5"
            assert connection.cookies == "c1"

        asyncio.run(run())

    def test_handle_bound_to_session(self) -> None:
        repo = InMemoryAdtRepository()
        repo.seed(REF)
        connection, client = _client(repo)

        async def run() -> None:
            await connection.connect()
            handle = await client.lock(REF)
            await connection.connect()
            with pytest.raises(TransportError) as exc_info:
                await client.update(REF, {"source_code": "x"}, handle)
            assert exc_info.value.status_code == 423
            assert classify(exc_info.value).kind is ErrorKind.LOCKED

        asyncio.run(run())

    def test_relock_in_same_session_returns_same_handle(self) -> None:
        repo = InMemoryAdtRepository()
        repo.seed(REF)
        connection, client = _client(repo)

        async def run() -> None:
            await connection.connect()
            assert await client.lock(REF) == await client.lock(REF)

        asyncio.run(run())

    def test_expired_lock_rejects_handle(self) -> None:
        repo = InMemoryAdtRepository()
        repo.seed(REF)
        connection, client = _client(repo)

        async def run() -> None:
            await connection.connect()
            handle = await client.lock(REF)
            repo.expire_lock(REF)
            with pytest.raises(TransportError) as exc_info:
                await client.unlock(REF, handle)
            assert classify(exc_info.value).kind is ErrorKind.BAD_REQUEST

        asyncio.run(run())


class TestFakeServerFailures:
    def test_fail_next_fires_once_and_is_recorded(self) -> None:
        repo = InMemoryAdtRepository()
        repo.seed(REF)
        repo.fail_next("read", RuntimeError("boom"))
        _, client = _client(repo)

        async def run() -> None:
            with pytest.raises(RuntimeError):
                await client.read(REF)
            assert (await client.read(REF))["version"] == "active"

        asyncio.run(run())
        assert repo.operations() == ["read", "read"]

    def test_connect_can_fail(self) -> None:
        repo = InMemoryAdtRepository()
        repo.fail_next("connect", TransportError("no route to host"))
        connection, _ = _client(repo)
        with pytest.raises(TransportError):
            asyncio.run(connection.connect())
        assert connection.connects == 0

    def test_activation_with_warnings(self) -> None:
        repo = InMemoryAdtRepository()
        obj = repo.seed(REF)
        obj.inactive_source = "* warning: obsolete statement"
        _, client = _client(repo)
        result = asyncio.run(client.activate(REF))
        assert result.activated
        assert [m.text for m in result.warnings] == ["Activated with warnings"]
        assert obj.source == "* warning: obsolete statement"
        assert obj.inactive_source is None
