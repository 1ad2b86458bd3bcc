"""Rendered read views and their path-level invalidation.

Read endpoints cache their JSON payload under the view path they serve
(``/events``, ``/admin/events/<id>`` ...). Mutations drop those paths after a
successful write; a path ending in ``/*`` drops the whole subtree.
Invalidation is best-effort: a cache fault is logged and never fails the
mutation that triggered it.
"""

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import redis

logger = logging.getLogger(__name__)

SUBTREE_SUFFIX = "/*"


def _split_subtree(path: str) -> Tuple[str, bool]:
    if path.endswith(SUBTREE_SUFFIX):
        return path[: -len(SUBTREE_SUFFIX)], True
    return path, False


class ViewCache:
    def get(self, path: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, path: str, payload: Any) -> None:
        raise NotImplementedError

    def invalidate(self, path: str) -> None:
        raise NotImplementedError


class NullViewCache(ViewCache):
    """Caches nothing; every read is rebuilt."""

    def get(self, path: str) -> Optional[Any]:
        return None

    def set(self, path: str, payload: Any) -> None:
        return None

    def invalidate(self, path: str) -> None:
        return None


class MemoryViewCache(ViewCache):
    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at <= self._clock():
                self._entries.pop(path, None)
                return None
            return payload

    def set(self, path: str, payload: Any) -> None:
        with self._lock:
            now = self._clock()
            for key in [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]:
                self._entries.pop(key, None)
            self._entries[path] = (now + self.ttl_seconds, payload)

    def invalidate(self, path: str) -> None:
        base, subtree = _split_subtree(path)
        with self._lock:
            if not subtree:
                self._entries.pop(base, None)
                return
            prefix = base.rstrip("/") + "/"
            for key in [key for key in self._entries if key == base or key.startswith(prefix)]:
                self._entries.pop(key, None)

    def paths(self):
        with self._lock:
            return sorted(self._entries.keys())


class RedisViewCache(ViewCache):
    KEY_PREFIX = "view:"

    def __init__(self, client: redis.Redis, ttl_seconds: int = 300):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def _key(self, path: str) -> str:
        return f"{self.KEY_PREFIX}{path}"

    def get(self, path: str) -> Optional[Any]:
        try:
            raw = self.client.get(self._key(path))
        except redis.RedisError:
            logger.exception("View cache read failed for %s", path)
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, path: str, payload: Any) -> None:
        try:
            self.client.setex(self._key(path), self.ttl_seconds, json.dumps(payload))
        except redis.RedisError:
            logger.exception("View cache write failed for %s", path)

    def invalidate(self, path: str) -> None:
        base, subtree = _split_subtree(path)
        if not subtree:
            self.client.delete(self._key(base))
            return
        keys = [self._key(base)]
        keys.extend(self.client.scan_iter(match=f"{self._key(base.rstrip('/'))}/*"))
        self.client.delete(*keys)


def build_view_cache(url: str = "", ttl_seconds: int = 300) -> ViewCache:
    if not url:
        return MemoryViewCache(ttl_seconds=ttl_seconds)
    if url == "none":
        return NullViewCache()
    client = redis.Redis.from_url(url, decode_responses=True, socket_connect_timeout=5)
    logger.info("View cache backed by Redis at %s", url)
    return RedisViewCache(client, ttl_seconds=ttl_seconds)


def invalidate_paths(cache: Optional[ViewCache], paths: Iterable[str]) -> None:
    if cache is None:
        return
    for path in dict.fromkeys(paths):
        try:
            cache.invalidate(path)
        except Exception as exc:
            logger.warning("View invalidation failed for %s: %s", path, exc)


def cached_view(cache: Optional[ViewCache], path: str, build: Callable[[], Tuple[bool, Any]]) -> Any:
    """Serve ``path`` from the cache or build it; only successful builds are stored.

    ``build`` returns ``(cacheable, payload)`` where payload is JSON-ready.
    """
    if cache is not None:
        hit = cache.get(path)
        if hit is not None:
            return hit
    cacheable, payload = build()
    if cacheable and cache is not None:
        cache.set(path, payload)
    return payload


# Read paths each kind of mutation can change.


def event_paths(event_id: Optional[str] = None):
    paths = ["/admin/events", "/events"]
    if event_id:
        paths.extend([f"/events/{event_id}", f"/admin/events/{event_id}/*"])
    return paths


def competition_paths(event_id: str):
    return ["/admin/events", f"/admin/events/{event_id}/*", f"/events/{event_id}", "/events"]


def participant_paths(event_id: str):
    return [f"/admin/events/{event_id}/participants"]


def registration_paths(event_id: str):
    return [f"/events/{event_id}", "/events", f"/admin/events/{event_id}/participants"]


def member_paths():
    return ["/admin/members", "/about"]


def resource_paths():
    return ["/admin/resources", "/resources", "/resources/*"]


def profile_paths():
    return ["/profile"]
