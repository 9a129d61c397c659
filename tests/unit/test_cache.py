import pytest
import time

from utils.cache import ResponseCache, make_cache_key


@pytest.fixture
def small_cache():
    return ResponseCache("test", max_size=3, default_ttl=60, cleanup_interval=0.01)


@pytest.fixture
def frozen_time(monkeypatch):
    """Controllable clock for TTL tests."""
    clock = {"now": 1_000_000.0}
    monkeypatch.setattr("utils.cache.time.time", lambda: clock["now"])
    return clock


def test_cache_evicts_least_recently_used_when_full(small_cache):
    """Given a full cache, when a new key is inserted, the least recently accessed key should be evicted."""
    small_cache.set("a", 1)
    small_cache.set("b", 2)
    small_cache.set("c", 3)

    small_cache.get("a")
    small_cache.set("d", 4)

    assert small_cache.size() == 3
    assert small_cache.get("b") is None
    assert small_cache.get("a") == 1
    assert small_cache.get("d") == 4


def test_cache_overwriting_existing_key_does_not_evict(small_cache):
    """Given a full cache, when an existing key is updated, no entry should be evicted."""
    for key in ("a", "b", "c"):
        small_cache.set(key, key)

    small_cache.set("a", "updated")

    assert small_cache.size() == 3
    assert small_cache.get("a") == "updated"
    assert small_cache.keys()[-1] == "a"


def test_cache_inserting_n_plus_one_keys_keeps_n():
    """Given maxSize N, when N+1 distinct keys are inserted, exactly N entries should remain."""
    cache = ResponseCache("bounded", max_size=10)
    for i in range(11):
        cache.set(f"key_{i}", i)

    assert cache.size() == 10
    assert not cache.has("key_0")


def test_cache_expired_entry_is_absent_and_removed(small_cache, frozen_time):
    """Given an entry past its TTL, when it is read, it should be reported absent and deleted."""
    small_cache.set("short", "value", ttl=5)

    frozen_time["now"] += 6

    assert small_cache.get("short") is None
    assert "short" not in small_cache.keys()


def test_cache_entry_within_ttl_is_returned(small_cache, frozen_time):
    small_cache.set("key", "value", ttl=5)
    frozen_time["now"] += 4
    assert small_cache.get("key") == "value"


def test_cache_zero_ttl_is_not_replaced_by_default(small_cache, frozen_time):
    small_cache.set("instant", "value", ttl=0)
    small_cache.set("default", "value")
    frozen_time["now"] += 1

    assert small_cache.get("instant") is None
    assert small_cache.get("default") == "value"


def test_cleanup_expired_sweeps_only_stale_entries(small_cache, frozen_time):
    """Given a mix of fresh and stale entries, when the sweeper runs, only stale ones should be removed."""
    small_cache.set("old", 1, ttl=1)
    small_cache.set("fresh", 2, ttl=100)
    frozen_time["now"] += 10

    removed = small_cache.cleanup_expired()

    assert removed == 1
    assert small_cache.keys() == ["fresh"]


def test_get_stats_reports_size_and_hits(small_cache):
    small_cache.set("a", "x")
    small_cache.get("a")

    stats = small_cache.get_stats()

    assert stats["name"] == "test"
    assert stats["size"] == 1
    assert stats["max_size"] == 3
    assert stats["hit_rate"] == 2


def test_delete_and_clear(small_cache):
    small_cache.set("a", 1)
    small_cache.set("b", 2)

    assert small_cache.delete("a") is True
    assert small_cache.delete("a") is False

    small_cache.clear()
    assert small_cache.size() == 0


@pytest.mark.anyio
async def test_background_cleanup_removes_expired_entries(small_cache):
    """Given a running sweeper, expired entries should disappear without being read."""
    import asyncio

    small_cache.set("stale", 1, ttl=0.001)
    time.sleep(0.01)

    small_cache.start_cleanup()
    await asyncio.sleep(0.05)
    await small_cache.stop_cleanup()

    assert small_cache.keys() == []


def test_make_cache_key_depends_on_model_and_web_flag():
    """Given the same conversation, different models or web flags should produce different keys."""
    messages = [{"role": "user", "content": "hello"}]

    base = make_cache_key(messages, "qwen3-0.6b", False)

    assert base == make_cache_key([{"content": "hello", "role": "user"}], "qwen3-0.6b", False)
    assert base != make_cache_key(messages, "qwen3-4b", False)
    assert base != make_cache_key(messages, "qwen3-0.6b", True)
