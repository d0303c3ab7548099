"""Result and suggestion caching with Redis primary and in-memory fallback.

Backends only know ``get``/``set`` with a TTL. :class:`SearchCache` layers the
key shapes, per-tier TTLs and hit counters on top: every stored entry is an
envelope ``{"data", "storedAt", "hits"}`` and a hit rewrites the envelope with
an incremented counter for the remainder of its TTL.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional, Protocol

import redis

from .config import settings

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None: ...


@dataclass
class RedisCache:
    client: redis.Redis

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as exc:  # pragma: no cover - protective
            logger.warning("Redis get failed: %s", exc)
            return None
        if not data:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return None

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        try:
            self.client.setex(key, ttl, json.dumps(value))
        except (redis.RedisError, TypeError) as exc:  # pragma: no cover - protective
            logger.warning("Redis set failed: %s", exc)


class InMemoryCache:
    """TTL cache that evicts the least recently accessed entry when full."""

    def __init__(self, max_entries: int = 100) -> None:
        self.max_entries = max_entries
        self._store: "OrderedDict[str, tuple[float, Dict[str, Any]]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._store.get(key)
            if not value:
                return None
            expires_at, payload = value
            if expires_at < time.time():
                self._store.pop(key, None)
                return None
            self._store.move_to_end(key)
            return payload

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        with self._lock:
            self._store[key] = (time.time() + ttl, value)
            self._store.move_to_end(key)
            while len(self._store) > self.max_entries:
                evicted, _ = self._store.popitem(last=False)
                logger.debug("cache_evict key=%r", evicted)


class CacheHit(NamedTuple):
    data: Dict[str, Any]
    hits: int
    age_seconds: float


def search_key(query: str, page: int, page_size: int) -> str:
    return f"search:{(query or '').lower().strip()}:{page}:{page_size}"


def suggestion_key(query: str) -> str:
    return f"suggest:{(query or '').lower().strip()}"


@dataclass
class SearchCache:
    search_backend: CacheBackend
    suggestion_backend: CacheBackend
    search_ttl: int = settings.search_cache_ttl_seconds
    suggestion_ttl: int = settings.suggestion_cache_ttl_seconds
    _counters: Dict[str, int] = field(default_factory=lambda: {"hits": 0, "misses": 0, "stores": 0})
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def _count(self, name: str) -> None:
        with self._lock:
            self._counters[name] += 1

    def _read(self, backend: CacheBackend, key: str, ttl: int) -> Optional[CacheHit]:
        envelope = backend.get(key)
        if not envelope or "data" not in envelope:
            self._count("misses")
            return None
        age = max(time.time() - float(envelope.get("storedAt", 0)), 0.0)
        hits = int(envelope.get("hits", 0)) + 1
        backend.set(key, {**envelope, "hits": hits}, max(1, int(ttl - age)))
        self._count("hits")
        return CacheHit(envelope["data"], hits, age)

    def _write(self, backend: CacheBackend, key: str, data: Dict[str, Any], ttl: int) -> None:
        backend.set(key, {"data": data, "storedAt": time.time(), "hits": 0}, ttl)
        self._count("stores")

    def get_search(self, query: str, page: int, page_size: int) -> Optional[CacheHit]:
        return self._read(self.search_backend, search_key(query, page, page_size), self.search_ttl)

    def set_search(self, query: str, page: int, page_size: int, data: Dict[str, Any]) -> None:
        # Only successful searches that found something are worth replaying.
        if not data.get("ok") or not data.get("products"):
            return
        self._write(self.search_backend, search_key(query, page, page_size), data, self.search_ttl)

    def get_suggestions(self, query: str) -> Optional[CacheHit]:
        return self._read(self.suggestion_backend, suggestion_key(query), self.suggestion_ttl)

    def set_suggestions(self, query: str, data: Dict[str, Any]) -> None:
        self._write(self.suggestion_backend, suggestion_key(query), data, self.suggestion_ttl)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            stats: Dict[str, Any] = dict(self._counters)
        for name, backend in (("searchCacheSize", self.search_backend), ("suggestionCacheSize", self.suggestion_backend)):
            stats[name] = len(backend) if isinstance(backend, InMemoryCache) else None
        return stats


_cache: SearchCache | None = None


def get_cache() -> SearchCache:
    global _cache
    if _cache is not None:
        return _cache
    try:
        client = redis.Redis(host=settings.redis_host, port=settings.redis_port, decode_responses=False)
        client.ping()
        logger.info("Using Redis cache at %s:%s", settings.redis_host, settings.redis_port)
        backend = RedisCache(client)
        _cache = SearchCache(backend, backend)
    except redis.RedisError:
        logger.warning("Redis not available, using in-memory cache")
        _cache = SearchCache(
            InMemoryCache(settings.search_cache_max_entries),
            InMemoryCache(settings.suggestion_cache_max_entries),
        )
    return _cache
