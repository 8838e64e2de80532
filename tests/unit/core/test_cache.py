"""Tests for the TTL lookup cache."""

from datetime import timedelta

from autobind.core.cache import Cache


async def test_get_and_set(now) -> None:
    cache = Cache(default_ttl_seconds=60)
    assert await cache.get("vin:X", now=now) is None

    await cache.set("vin:X", {"make": "Honda"}, now=now)

    assert await cache.get("vin:X", now=now + timedelta(seconds=59)) == {"make": "Honda"}
    assert cache.hits == 1
    assert cache.misses == 1


async def test_stale_entries_are_dropped(now) -> None:
    cache = Cache(default_ttl_seconds=60)
    await cache.set("k", 1, now=now)

    assert await cache.get("k", now=now + timedelta(seconds=60)) is None
    assert len(cache) == 0


async def test_per_entry_ttl_and_delete(now) -> None:
    cache = Cache()
    await cache.set("short", "a", now=now, ttl_seconds=1)
    await cache.set("long", "b", now=now)

    later = now + timedelta(seconds=2)
    assert await cache.get("short", now=later) is None
    assert await cache.get("long", now=later) == "b"
    assert await cache.delete("long") is True
    assert await cache.delete("long") is False
