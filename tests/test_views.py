import logging
from unittest.mock import MagicMock

import redis

from views import (
    MemoryViewCache,
    NullViewCache,
    RedisViewCache,
    build_view_cache,
    cached_view,
    event_paths,
    invalidate_paths,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = MemoryViewCache(ttl_seconds=30, clock=clock)
    cache.set("/events", {"n": 1})
    clock.now += 29
    assert cache.get("/events") == {"n": 1}
    clock.now += 2
    assert cache.get("/events") is None


def test_subtree_invalidation_keeps_siblings():
    cache = MemoryViewCache()
    for path in ("/admin/events/E1", "/admin/events/E1/participants", "/admin/events/E10", "/events"):
        cache.set(path, {"path": path})
    cache.invalidate("/admin/events/E1/*")
    assert cache.paths() == ["/admin/events/E10", "/events"]


def test_event_paths_cover_detail_and_admin_subtree():
    cache = MemoryViewCache()
    for path in ("/events", "/admin/events", "/events/E1", "/admin/events/E1/participants", "/events/E2"):
        cache.set(path, {})
    invalidate_paths(cache, event_paths("E1"))
    assert cache.paths() == ["/events/E2"]


def test_invalidation_failures_are_logged_not_raised(caplog):
    broken = MagicMock()
    broken.invalidate.side_effect = redis.ConnectionError("refused")
    with caplog.at_level(logging.WARNING, logger="views"):
        invalidate_paths(broken, ["/events", "/events"])
    assert broken.invalidate.call_count == 1
    assert "View invalidation failed for /events" in caplog.text


def test_cached_view_stores_only_cacheable_builds():
    cache = MemoryViewCache()
    calls = []

    def failing():
        calls.append("fail")
        return False, {"success": False}

    cached_view(cache, "/events", failing)
    cached_view(cache, "/events", failing)
    assert calls == ["fail", "fail"]

    def working():
        calls.append("ok")
        return True, {"success": True}

    assert cached_view(cache, "/about", working) == {"success": True}
    assert cached_view(cache, "/about", working) == {"success": True}
    assert calls.count("ok") == 1


def test_null_cache_never_hits():
    cache = NullViewCache()
    cache.set("/events", {"n": 1})
    assert cache.get("/events") is None


def test_redis_cache_keys_and_subtree_scan():
    client = MagicMock()
    client.get.return_value = '{"n": 1}'
    client.scan_iter.return_value = iter(["view:/admin/events/E1/participants"])
    cache = RedisViewCache(client, ttl_seconds=60)

    assert cache.get("/events") == {"n": 1}
    client.get.assert_called_with("view:/events")

    cache.set("/events", {"n": 2})
    client.setex.assert_called_with("view:/events", 60, '{"n": 2}')

    cache.invalidate("/admin/events/E1/*")
    client.scan_iter.assert_called_with(match="view:/admin/events/E1/*")
    client.delete.assert_called_with("view:/admin/events/E1", "view:/admin/events/E1/participants")


def test_redis_read_errors_are_cache_misses():
    client = MagicMock()
    client.get.side_effect = redis.TimeoutError("slow")
    assert RedisViewCache(client).get("/events") is None


def test_build_view_cache_picks_backend():
    assert isinstance(build_view_cache("", 10), MemoryViewCache)
    assert isinstance(build_view_cache("none", 10), NullViewCache)
    assert isinstance(build_view_cache("redis://localhost:6379/0", 10), RedisViewCache)


def test_writes_purge_expired_entries():
    clock = FakeClock()
    cache = MemoryViewCache(ttl_seconds=30, clock=clock)
    for category in ("math", "no-such-category", "zzz"):
        cache.set(f"/resources/{category}", {"data": []})
    clock.now += 31
    cache.set("/resources/physics", {"data": []})
    assert cache.paths() == ["/resources/physics"]
