"""Search and suggestion caching on the in-memory backend."""

from unittest.mock import MagicMock

import redis

from furniture_search.cache import InMemoryCache, RedisCache, SearchCache, search_key, suggestion_key


def _cache(max_entries=10):
    return SearchCache(InMemoryCache(max_entries), InMemoryCache(max_entries))


def test_key_shapes_normalize_query():
    assert search_key("  Grey Sofa ", 2, 24) == "search:grey sofa:2:24"
    assert suggestion_key("Sofa") == "suggest:sofa"


def test_in_memory_evicts_least_recently_used():
    backend = InMemoryCache(max_entries=2)
    backend.set("a", {"v": 1}, 60)
    backend.set("b", {"v": 2}, 60)
    backend.get("a")
    backend.set("c", {"v": 3}, 60)

    assert backend.get("b") is None
    assert backend.get("a") == {"v": 1}
    assert len(backend) == 2


def test_in_memory_expires_entries():
    backend = InMemoryCache()
    backend.set("gone", {"v": 1}, -1)

    assert backend.get("gone") is None


def test_search_hits_are_counted():
    cache = _cache()
    payload = {"ok": True, "products": [{"_id": "p1"}], "total": 1}

    assert cache.get_search("sofa", 1, 24) is None
    cache.set_search("sofa", 1, 24, payload)
    first = cache.get_search("SOFA ", 1, 24)
    second = cache.get_search("sofa", 1, 24)

    assert first.data == payload
    assert (first.hits, second.hits) == (1, 2)
    assert second.age_seconds >= 0
    assert cache.get_search("sofa", 2, 24) is None
    stats = cache.stats()
    assert (stats["hits"], stats["misses"], stats["stores"]) == (2, 2, 1)
    assert stats["searchCacheSize"] == 1


def test_only_successful_searches_with_products_are_stored():
    cache = _cache()
    cache.set_search("zzqx", 1, 24, {"ok": True, "products": []})
    cache.set_search("sofa", 1, 24, {"ok": False, "products": [{"_id": "p1"}]})

    assert cache.get_search("zzqx", 1, 24) is None
    assert cache.get_search("sofa", 1, 24) is None
    assert cache.stats()["stores"] == 0


def test_suggestions_use_their_own_backend():
    cache = _cache()
    cache.set_suggestions("leather sofa for home", {"ok": True, "type": "general_furniture"})

    assert cache.get_suggestions("leather sofa for home").data["type"] == "general_furniture"
    assert cache.stats()["searchCacheSize"] == 0
    assert cache.stats()["suggestionCacheSize"] == 1


def test_redis_errors_degrade_to_miss():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.ConnectionError("down")
    backend = RedisCache(client)

    assert backend.get("search:sofa:1:24") is None
    backend.set("search:sofa:1:24", {"data": {}}, 60)
    assert SearchCache(backend, backend).stats()["searchCacheSize"] is None


def test_redis_round_trips_json():
    client = MagicMock()
    client.get.return_value = b'{"data": {"ok": true}, "storedAt": 0, "hits": 0}'
    backend = RedisCache(client)

    assert backend.get("k") == {"data": {"ok": True}, "storedAt": 0, "hits": 0}
    backend.set("k", {"data": 1}, 30)
    client.setex.assert_called_once_with("k", 30, '{"data": 1}')
