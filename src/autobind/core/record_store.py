"""Durable record store contract and an in-memory implementation.

Status transitions are applied through :meth:`RecordStore.compare_and_set`,
a single atomic update guarded by the record's current status. Two callers
racing on the same precondition cannot both succeed.
"""

import asyncio
from typing import Any, Protocol, runtime_checkable

from beartype import beartype
from pydantic import BaseModel


@runtime_checkable
class RecordStore(Protocol):
    """Persistence collaborator keyed by a human-readable reference."""

    async def get(self, key: str) -> Any | None: ...

    async def insert(self, key: str, record: Any) -> bool:
        """Store a new record; False when the key is already taken."""
        ...

    async def compare_and_set(self, key: str, expected_status: Any, record: Any) -> bool:
        """Replace the record only while its status still equals ``expected_status``."""
        ...

    async def delete(self, key: str) -> bool: ...


class InMemoryRecordStore:
    """Dict-backed store guarded by an asyncio lock."""

    def __init__(self, name: str = "records") -> None:
        self.name = name
        self._records: dict[str, BaseModel] = {}
        self._lock = asyncio.Lock()

    @beartype
    async def get(self, key: str) -> Any | None:
        async with self._lock:
            return self._records.get(key)

    @beartype
    async def insert(self, key: str, record: BaseModel) -> bool:
        async with self._lock:
            if key in self._records:
                return False
            self._records[key] = record
            return True

    @beartype
    async def compare_and_set(
        self, key: str, expected_status: Any, record: BaseModel
    ) -> bool:
        async with self._lock:
            current = self._records.get(key)
            if current is None or getattr(current, "status", None) != expected_status:
                return False
            self._records[key] = record
            return True

    @beartype
    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._records.pop(key, None) is not None

    @beartype
    async def keys(self) -> list[str]:
        async with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
