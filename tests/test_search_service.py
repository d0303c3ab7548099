"""End-to-end orchestration over the in-memory catalog."""

import pytest

from furniture_search import search_service as search_module
from furniture_search.catalog import InMemoryCatalog
from furniture_search.models import SearchStage
from furniture_search.search_service import UNAVAILABLE_MESSAGE, SearchService


class FlakyCatalog:
    """Delegates to a real catalog but fails the operations named in ``broken``."""

    def __init__(self, inner, *broken):
        self.inner = inner
        self.broken = set(broken)
        self.calls = []

    def _call(self, name, *args):
        self.calls.append(name)
        if name in self.broken:
            raise ConnectionError(f"{name} unavailable")
        return getattr(self.inner, name)(*args)

    def find_published(self):
        return self._call("find_published")

    def count_published(self):
        return self._call("count_published")

    def find_featured_or_in_stock(self, limit):
        return self._call("find_featured_or_in_stock", limit)

    def enrich(self, products):
        return self._call("enrich", products)


@pytest.mark.asyncio
async def test_three_seater_sofa_ranks_exact_match_first(service):
    """The 3-seater fabric sofa beats the featured 2-seater set."""

    result = await service.search("3 seater sofa")

    assert result.ok and result.error is None
    assert result.stage == SearchStage.STRICT
    assert result.intent.primaryType == "sofa"
    assert result.intent.confidence == 1.0
    assert result.numerics.seater == 3
    top = result.products[0]
    assert top["name"] == "Grey Fabric 3-Seater Sofa"
    assert top["relevanceCategory"] == "exact"
    assert top["intentMatch"] > 0
    assert result.fallback is False
    assert result.noResults is False
    assert [item["_id"] for item in result.products] == ["p1", "p2", "p6"]
    assert result.total == 3


@pytest.mark.asyncio
async def test_results_are_enriched_with_categories(service):
    result = await service.search("3 seater sofa")

    top = result.products[0]
    assert top["category"] == {"_id": "cat-living", "name": "Living Room", "slug": "living-room"}
    assert top["subcategory"]["slug"] == "sofas"
    assert "category" not in result.products[2] or result.products[2]["category"]["_id"] == "cat-living"


@pytest.mark.asyncio
async def test_unpublished_products_never_returned(service):
    result = await service.search("velvet sofa")

    assert all(item["_id"] != "p5" for item in result.products)


@pytest.mark.asyncio
async def test_nonsense_query_falls_back_to_popularity(service):
    """Relaxed finds nothing either, so the popular list fills one page."""

    result = await service.search("zzqx", page_size=2)

    assert result.noResults is True
    assert result.stage == SearchStage.POPULARITY
    assert [item["_id"] for item in result.products] == ["p2", "p3"]
    assert result.total == len(result.products) == 2
    assert result.hasMore is False


@pytest.mark.asyncio
async def test_brand_only_query_uses_relaxed_stage(service):
    result = await service.search("urban")

    assert result.stage == SearchStage.RELAXED
    assert result.noResults is False
    assert [item["_id"] for item in result.products] == ["p1"]
    # relaxed scores are popularity-based and well below the strict floor
    assert result.fallback is True


@pytest.mark.asyncio
async def test_empty_query_browses_published_catalog(service):
    result = await service.search("")

    assert result.stage == SearchStage.STRICT
    assert result.total == 5
    assert result.fallback is False
    assert result.normalized == ""
    assert {item["relevanceCategory"] for item in result.products} == {"general"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "page,page_size,expected",
    [
        ("abc", "0", (1, 24)),
        (-3, 500, (1, 60)),
        (None, None, (1, 24)),
        ("2", "1", (2, 1)),
        (1.0, True, (1, 24)),
        (float("inf"), 5, (1, 5)),
        (1, float("nan"), (1, 24)),
    ],
)
async def test_malformed_pagination_is_sanitized(service, page, page_size, expected):
    result = await service.search("sofa", page, page_size)

    assert result.error is None
    assert (result.page, result.pageSize) == expected


@pytest.mark.asyncio
async def test_pagination_counts_from_ranked_list(service):
    first = await service.search("3 seater sofa", page=1, page_size=2)
    second = await service.search("3 seater sofa", page=2, page_size=2)

    assert [item["_id"] for item in first.products] == ["p1", "p2"]
    assert [item["_id"] for item in second.products] == ["p6"]
    assert first.total == second.total == 3
    assert first.hasMore is True and second.hasMore is False
    assert first.totalPages == 2


@pytest.mark.asyncio
async def test_page_past_end_is_empty_but_not_a_miss(service):
    result = await service.search("3 seater sofa", page=9, page_size=2)

    assert result.products == []
    assert result.total == 3
    assert result.stage == SearchStage.STRICT
    assert result.noResults is False


@pytest.mark.asyncio
async def test_empty_catalog_short_circuits():
    result = await SearchService(InMemoryCatalog([])).search("sofa")

    assert result.products == []
    assert result.total == 0
    assert result.stage is None
    assert result.noResults is True


@pytest.mark.asyncio
async def test_candidate_failure_uses_flat_fallback(catalog):
    """Strict and relaxed both lose the candidate fetch; the flat list answers."""

    flaky = FlakyCatalog(catalog, "find_published")
    result = await SearchService(flaky).search("3 seater sofa")

    assert result.error is None
    assert result.stage == SearchStage.FALLBACK
    assert result.noResults is True
    assert result.total == len(result.products) == 4
    assert flaky.calls.count("find_published") == 2


@pytest.mark.asyncio
async def test_enrichment_failure_keeps_documents(catalog):
    result = await SearchService(FlakyCatalog(catalog, "enrich")).search("3 seater sofa")

    assert result.products[0]["_id"] == "p1"
    assert "category" not in result.products[0]


@pytest.mark.asyncio
async def test_total_catalog_outage_never_raises(catalog):
    broken = FlakyCatalog(catalog, "find_published", "count_published", "find_featured_or_in_stock", "enrich")
    result = await SearchService(broken).search("3 seater sofa")

    assert result.ok is True
    assert result.products == []
    assert result.noResults is True


@pytest.mark.asyncio
async def test_unexpected_error_returns_degraded_result(service, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(search_module, "classify_tokens", explode)
    result = await service.search("sofa", page=3, page_size=5)

    assert result.ok is True
    assert result.error == UNAVAILABLE_MESSAGE
    assert result.products == []
    assert (result.page, result.pageSize) == (3, 5)


@pytest.mark.asyncio
async def test_search_is_deterministic(service):
    first = await service.search("fabric sofa")
    second = await service.search("fabric sofa")

    assert [item["_id"] for item in first.products] == [item["_id"] for item in second.products]
