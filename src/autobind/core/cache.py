"""In-process TTL cache for idempotent lookups.

Entries carry their own store time; callers pass ``now`` so staleness is
decided without reading the wall clock.
"""

from datetime import datetime, timedelta
from typing import Any

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field


@beartype
class CacheEntry(BaseModel):
    """Cache entry with value and metadata."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    value: Any = Field(..., description="Cached value")
    stored_at: datetime = Field(..., description="When the value was cached")
    ttl_seconds: int = Field(default=86400, ge=0, description="Time to live in seconds")

    @beartype
    def is_stale(self, now: datetime) -> bool:
        return now >= self.stored_at + timedelta(seconds=self.ttl_seconds)


class Cache:
    """Key/value cache with per-entry expiry."""

    def __init__(self, default_ttl_seconds: int = 86400) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl_seconds = default_ttl_seconds
        self.hits = 0
        self.misses = 0

    @beartype
    async def get(self, key: str, *, now: datetime) -> Any | None:
        """Get value from cache, dropping it when stale."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if entry.is_stale(now):
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    @beartype
    async def set(
        self, key: str, value: Any, *, now: datetime, ttl_seconds: int | None = None
    ) -> None:
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=now,
            ttl_seconds=self._default_ttl_seconds if ttl_seconds is None else ttl_seconds,
        )

    @beartype
    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)
