"""HTTP surface with the catalog and cache swapped for in-memory versions."""

import pytest
from fastapi.testclient import TestClient

from furniture_search.cache import InMemoryCache, SearchCache
from furniture_search.main import app, get_search_cache, get_search_service


@pytest.fixture
def client(service):
    cache = SearchCache(InMemoryCache(), InMemoryCache())
    app.dependency_overrides[get_search_service] = lambda: service
    app.dependency_overrides[get_search_cache] = lambda: cache
    # no context manager: startup would try to reach Elasticsearch
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_search_returns_ranked_products(client):
    response = client.get("/search", params={"q": "3 seater sofa"})

    assert response.status_code == 200
    body = response.json()
    assert body["products"][0]["name"] == "Grey Fabric 3-Seater Sofa"
    assert body["stage"] == "strict"
    assert body["fromCache"] is False
    assert body["didYouMean"] == []
    assert response.headers["X-Cache"] == "MISS"
    assert response.headers["X-Search-Type"] == "sofa"


def test_repeat_search_is_served_from_cache(client):
    client.get("/search", params={"q": "3 seater sofa", "pageSize": 2})
    response = client.get("/search", params={"q": "3 SEATER SOFA ", "pageSize": "2"})

    body = response.json()
    assert body["fromCache"] is True
    assert body["cacheHits"] == 1
    assert len(body["products"]) == 2
    assert response.headers["X-Cache"] == "HIT"


def test_query_too_long_is_rejected(client):
    response = client.get("/search", params={"q": "sofa " * 50})

    assert response.status_code == 400


def test_no_results_include_did_you_mean(client):
    body = client.get("/search", params={"q": "zzqx"}).json()

    assert body["noResults"] is True
    assert body["stage"] == "popularity"
    assert body["didYouMean"]


def test_post_search_tolerates_bad_pagination(client):
    response = client.post("/search", json={"q": "sofa", "page": "abc", "pageSize": 0})

    assert response.status_code == 200
    body = response.json()
    assert (body["page"], body["pageSize"]) == (1, 24)
    assert body["error"] is None


def test_short_suggest_query_skips_cache(client):
    response = client.get("/search/suggest", params={"q": "so"})

    body = response.json()
    assert body["ok"] is True
    assert body["type"] == "instant"
    assert body["fromCache"] is True
    assert response.headers["X-Cache"] == "CLIENT"


def test_empty_suggest_query_returns_trending(client):
    body = client.get("/search/suggest").json()

    assert body["type"] == "trending"
    assert body["suggestions"]["trending"] == body["suggestions"]["queries"]


def test_long_suggest_query_is_cached(client):
    query = "leather sofa for living room"
    first = client.get("/search/suggest", params={"q": query})
    second = client.get("/search/suggest", params={"q": query})

    assert first.json()["type"] == "furniture_with_material"
    assert first.json()["fromCache"] is False
    assert second.json()["fromCache"] is True
    assert second.json()["suggestions"] == first.json()["suggestions"]
    assert second.headers["X-Cache"] == "HIT"
