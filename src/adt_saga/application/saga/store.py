"""Application saga – LockRegistry port with in-memory and JSON-file stores.

Every lock a saga acquires is recorded here until the matching unlock, so
that locks orphaned by a crash can be found and released later.
"""

from __future__ import annotations

import abc
import asyncio
import json
import os
import pathlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from adt_saga.kernel.time import Clock, SystemClock
from adt_saga.kernel.types.refs import ObjectRef

REGISTRY_FILE_NAME = "active-locks.json"


def _registry_key(object_type: str, object_name: str, parent: str | None) -> str:
    return f"{object_type}:{parent or ''}:{object_name}"


@dataclass(frozen=True)
class LockRecord:
    """Durable representation of a held lock."""

    object_type: str
    object_name: str
    session_id: str
    lock_handle: str
    timestamp: datetime
    pid: int
    parent: str | None = None

    @property
    def key(self) -> str:
        return _registry_key(self.object_type, self.object_name, self.parent)

    @property
    def ref(self) -> ObjectRef:
        return ObjectRef(self.object_type, self.object_name, self.parent)

    def to_dict(self) -> dict[str, Any]:
        return {
            "object_type": self.object_type,
            "object_name": self.object_name,
            "parent": self.parent,
            "session_id": self.session_id,
            "lock_handle": self.lock_handle,
            "timestamp": self.timestamp.isoformat(),
            "pid": self.pid,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LockRecord:
        return cls(
            object_type=data["object_type"],
            object_name=data["object_name"],
            parent=data.get("parent"),
            session_id=data["session_id"],
            lock_handle=data["lock_handle"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            pid=int(data["pid"]),
        )


def _process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


class LockRegistry(abc.ABC):
    """Port — remember which locks are currently held."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or SystemClock()

    def record_for(
        self,
        ref: ObjectRef,
        *,
        session_id: str,
        lock_handle: str,
    ) -> LockRecord:
        """Build a record for *ref* stamped with the current time and pid."""
        return LockRecord(
            object_type=ref.object_type,
            object_name=ref.name,
            parent=ref.parent,
            session_id=session_id,
            lock_handle=lock_handle,
            timestamp=self._clock.now(),
            pid=os.getpid(),
        )

    @abc.abstractmethod
    async def register(self, record: LockRecord) -> None:
        """Persist (upsert) *record*."""

    @abc.abstractmethod
    async def remove(self, ref: ObjectRef) -> LockRecord | None:
        """Drop the record for *ref*; return it when one existed."""

    @abc.abstractmethod
    async def all(self) -> list[LockRecord]: ...

    async def get(self, ref: ObjectRef) -> LockRecord | None:
        key = _registry_key(ref.object_type, ref.name, ref.parent)
        for record in await self.all():
            if record.key == key:
                return record
        return None

    async def stale(self, older_than: float) -> list[LockRecord]:
        """Records acquired more than *older_than* seconds ago."""
        cutoff = self._clock.now() - timedelta(seconds=older_than)
        return [r for r in await self.all() if r.timestamp < cutoff]

    async def dead_process_locks(self) -> list[LockRecord]:
        """Records whose owning process no longer runs."""
        return [r for r in await self.all() if not _process_alive(r.pid)]

    async def cleanup(self, records: list[LockRecord]) -> int:
        """Remove *records*; return how many were dropped."""
        removed = 0
        for record in records:
            if await self.remove(record.ref) is not None:
                removed += 1
        return removed


class InMemoryLockRegistry(LockRegistry):
    """In-memory :class:`LockRegistry` for tests and single-process use."""

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._records: dict[str, LockRecord] = {}

    async def register(self, record: LockRecord) -> None:
        self._records[record.key] = record

    async def remove(self, ref: ObjectRef) -> LockRecord | None:
        return self._records.pop(_registry_key(ref.object_type, ref.name, ref.parent), None)

    async def all(self) -> list[LockRecord]:
        return list(self._records.values())


class JsonFileLockRegistry(LockRegistry):
    """:class:`LockRegistry` persisted as ``active-locks.json`` in *directory*.

    The file survives process restarts, which is what makes
    :meth:`dead_process_locks` useful for recovery. File I/O runs in a worker
    thread and read-modify-write cycles are serialised within the process.
    The file assumes a single writing process; two processes sharing one
    directory can lose each other's entries.
    """

    def __init__(self, directory: str | os.PathLike[str], clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._directory = pathlib.Path(directory)
        self._path = self._directory / REGISTRY_FILE_NAME
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def _load(self) -> dict[str, LockRecord]:
        if not self._path.exists():
            return {}
        raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        try:
            return {key: LockRecord.from_dict(value) for key, value in raw.items()}
        except (AttributeError, KeyError, TypeError) as exc:
            raise ValueError(f"Malformed lock registry {self._path}") from exc

    def _save(self, records: dict[str, LockRecord]) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".json.tmp")
        payload = {key: record.to_dict() for key, record in records.items()}
        tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self._path)

    def _upsert(self, record: LockRecord) -> None:
        records = self._load()
        records[record.key] = record
        self._save(records)

    def _pop(self, key: str) -> LockRecord | None:
        records = self._load()
        removed = records.pop(key, None)
        if removed is not None:
            self._save(records)
        return removed

    async def register(self, record: LockRecord) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._upsert, record)

    async def remove(self, ref: ObjectRef) -> LockRecord | None:
        key = _registry_key(ref.object_type, ref.name, ref.parent)
        async with self._write_lock:
            return await asyncio.to_thread(self._pop, key)

    async def all(self) -> list[LockRecord]:
        records = await asyncio.to_thread(self._load)
        return list(records.values())


__all__ = [
    "InMemoryLockRegistry",
    "JsonFileLockRegistry",
    "LockRecord",
    "LockRegistry",
    "REGISTRY_FILE_NAME",
]
