"""Catalog query capability consumed by the search orchestrator.

The orchestrator only needs four operations: every published product (the
candidate set the plans score), the published count, the popularity fallback
list and display enrichment of category references. :class:`ElasticsearchCatalog`
serves them from the indices maintained by :mod:`furniture_search.importer`;
:class:`InMemoryCatalog` serves them from plain lists for tests and the CLI's
offline mode.

All methods are synchronous; the orchestrator wraps them in
``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from itertools import islice
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from elasticsearch import Elasticsearch, helpers

from .config import Settings, settings as default_settings
from .scoring import is_featured_or_in_stock, popularity_fallback_key

logger = logging.getLogger(__name__)

PUBLISHED_FILTER = {"term": {"isPublished": True}}
REFERENCE_FIELDS = ("_id", "name", "slug")


class Catalog(Protocol):
    def find_published(self) -> List[Dict[str, Any]]: ...

    def count_published(self) -> int: ...

    def find_featured_or_in_stock(self, limit: int) -> List[Dict[str, Any]]: ...

    def enrich(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...


def _reference_ids(products: Iterable[Mapping[str, Any]], field: str) -> List[str]:
    ids: List[str] = []
    for product in products:
        value = product.get(field)
        if isinstance(value, str) and value and value not in ids:
            ids.append(value)
    return ids


def _attach_references(
    products: List[Dict[str, Any]],
    categories: Mapping[str, Mapping[str, Any]],
    subcategories: Mapping[str, Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    enriched: List[Dict[str, Any]] = []
    for product in products:
        item = dict(product)
        category = categories.get(str(product.get("categoryId")))
        if category is not None:
            item["category"] = {key: category.get(key) for key in REFERENCE_FIELDS}
        subcategory = subcategories.get(str(product.get("subCategoryId")))
        if subcategory is not None:
            item["subcategory"] = {key: subcategory.get(key) for key in REFERENCE_FIELDS}
        enriched.append(item)
    return enriched


class InMemoryCatalog:
    """List-backed catalog with the same contract as the Elasticsearch one."""

    def __init__(
        self,
        products: Iterable[Mapping[str, Any]],
        categories: Iterable[Mapping[str, Any]] = (),
        subcategories: Iterable[Mapping[str, Any]] = (),
    ) -> None:
        self._products = [dict(product) for product in products]
        self._categories = {str(item["_id"]): dict(item) for item in categories}
        self._subcategories = {str(item["_id"]): dict(item) for item in subcategories}

    def _published(self) -> List[Dict[str, Any]]:
        return [product for product in self._products if product.get("isPublished") is True]

    def find_published(self) -> List[Dict[str, Any]]:
        return [dict(product) for product in self._published()]

    def count_published(self) -> int:
        return len(self._published())

    def find_featured_or_in_stock(self, limit: int) -> List[Dict[str, Any]]:
        matching = [dict(product) for product in self._published() if is_featured_or_in_stock(product)]
        matching.sort(key=popularity_fallback_key)
        return matching[:limit]

    def enrich(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return _attach_references(products, self._categories, self._subcategories)


class ElasticsearchCatalog:
    def __init__(self, es: Elasticsearch, config: Optional[Settings] = None) -> None:
        self.es = es
        self.settings = config or default_settings

    @staticmethod
    def _document(hit: Mapping[str, Any]) -> Dict[str, Any]:
        return {"_id": hit.get("_id"), **(hit.get("_source") or {})}

    def find_published(self) -> List[Dict[str, Any]]:
        hits = helpers.scan(
            self.es,
            index=self.settings.es_index,
            query={"query": PUBLISHED_FILTER},
        )
        documents = [self._document(hit) for hit in islice(hits, self.settings.candidate_limit)]
        if len(documents) >= self.settings.candidate_limit:
            logger.warning("Candidate set truncated at %s published products", self.settings.candidate_limit)
        return documents

    def count_published(self) -> int:
        response = self.es.count(index=self.settings.es_index, query=PUBLISHED_FILTER)
        return int(response.get("count", 0))

    def find_featured_or_in_stock(self, limit: int) -> List[Dict[str, Any]]:
        response = self.es.search(
            index=self.settings.es_index,
            query={
                "bool": {
                    "filter": [PUBLISHED_FILTER],
                    "should": [
                        {"term": {"isFeatured": True}},
                        {"range": {"inStockQuantity": {"gt": 0}}},
                    ],
                    "minimum_should_match": 1,
                }
            },
            sort=[
                {"isFeatured": {"order": "desc"}},
                {"reviews.average": {"order": "desc", "missing": "_last"}},
                {"createdAt": {"order": "desc", "missing": "_last"}},
            ],
            size=limit,
        )
        hits = response.get("hits", {}).get("hits", [])
        return [self._document(hit) for hit in hits]

    def _lookup(self, index: str, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not ids:
            return {}
        response = self.es.mget(index=index, ids=ids)
        found: Dict[str, Dict[str, Any]] = {}
        for doc in response.get("docs", []):
            if doc.get("found"):
                found[doc["_id"]] = self._document(doc)
        return found

    def enrich(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        categories = self._lookup(self.settings.es_category_index, _reference_ids(products, "categoryId"))
        subcategories = self._lookup(self.settings.es_subcategory_index, _reference_ids(products, "subCategoryId"))
        return _attach_references(products, categories, subcategories)
