"""Catalog importer: reads the exported catalog file and bulk-indexes it."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from elasticsearch import Elasticsearch, helpers

from .config import settings
from .data_files import ensure_data_file

logger = logging.getLogger(__name__)

LFS_POINTER_PREFIX = "version https://git-lfs.github.com/spec/v1"

# canonical field -> accepted aliases, first present wins
FIELD_ALIASES = {
    "name": ("name", "title"),
    "isFeatured": ("isFeatured", "featured"),
    "isPublished": ("isPublished", "published"),
    "inStockQuantity": ("inStockQuantity", "stock", "quantity"),
    "colorOptions": ("colorOptions", "colors"),
    "categoryId": ("categoryId", "category"),
    "subCategoryId": ("subCategoryId", "subcategoryId", "subcategory"),
}


class CatalogData(NamedTuple):
    products: List[Dict[str, Any]]
    categories: List[Dict[str, Any]]
    subcategories: List[Dict[str, Any]]


def _object_id(value: Any) -> Optional[str]:
    """Accept plain ids and Mongo extended-JSON ``{"$oid": ...}`` ids."""
    if isinstance(value, dict):
        value = value.get("$oid")
    if value is None or value == "":
        return None
    return str(value)


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        first_line = fh.readline()
        if first_line.startswith(LFS_POINTER_PREFIX):
            logger.warning("Catalog file %s is a Git LFS pointer; real data not downloaded", path)
            return None
        fh.seek(0)
        return json.load(fh)


def _prepare_reference(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    ref_id = _object_id(raw.get("_id") or raw.get("id") or raw.get("slug"))
    if ref_id is None:
        return None
    return {"_id": ref_id, "name": raw.get("name") or raw.get("title") or "", "slug": raw.get("slug") or ""}


def _prepare_product(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    product_id = _object_id(raw.get("_id") or raw.get("id") or raw.get("sku") or raw.get("slug"))
    if product_id is None:
        logger.debug("Skipping product without id: %r", raw.get("name") or raw.get("title"))
        return None

    product = {key: value for key, value in raw.items() if key not in ("_id", "id")}
    for canonical, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in raw:
                product.pop(alias, None)
                product[canonical] = raw[alias]
                break

    for ref_field in ("categoryId", "subCategoryId"):
        if ref_field in product:
            value = product[ref_field]
            if isinstance(value, dict) and "$oid" not in value:
                value = value.get("_id") or value.get("id")
            product[ref_field] = _object_id(value)

    reviews = product.get("reviews") if isinstance(product.get("reviews"), dict) else {}
    if "rating" in raw:
        reviews = {**reviews, "average": raw["rating"]}
        product.pop("rating", None)
    if "reviewCount" in raw:
        reviews = {**reviews, "count": raw["reviewCount"]}
        product.pop("reviewCount", None)
    if reviews:
        product["reviews"] = reviews

    attributes = product.get("attributes")
    if isinstance(attributes, dict) and isinstance(attributes.get("seater"), str):
        seater = attributes["seater"].strip()
        product["attributes"] = {**attributes, "seater": int(seater) if seater.isdigit() else None}

    for date_field in ("createdAt", "updatedAt"):
        value = product.get(date_field)
        if isinstance(value, dict) and "$date" in value:
            product[date_field] = value["$date"]

    product.setdefault("isPublished", True)
    product["_id"] = product_id
    return product


def load_catalog(path: str | Path) -> CatalogData:
    """Load products, categories and subcategories from a JSON export.

    Accepts either ``{"products": [...], "categories": [...],
    "subcategories": [...]}`` or a bare list of products.
    """

    file_path = Path(path)
    if not file_path.exists():
        logger.warning("Catalog file %s is missing", file_path)
        return CatalogData([], [], [])
    data = _read_json(file_path)
    if isinstance(data, list):
        raw_products, raw_categories, raw_subcategories = data, [], []
    elif isinstance(data, dict):
        raw_products = data.get("products") or []
        raw_categories = data.get("categories") or []
        raw_subcategories = data.get("subcategories") or data.get("subCategories") or []
    else:
        return CatalogData([], [], [])

    products = [item for item in map(_prepare_product, raw_products) if item]
    categories = [item for item in map(_prepare_reference, raw_categories) if item]
    subcategories = [item for item in map(_prepare_reference, raw_subcategories) if item]
    logger.info(
        "Loaded catalog %s: %s products, %s categories, %s subcategories",
        file_path,
        len(products),
        len(categories),
        len(subcategories),
    )
    return CatalogData(products, categories, subcategories)


def _iter_actions(index: str, documents: Iterable[Dict[str, Any]]) -> Iterable[dict]:
    for document in documents:
        source = {key: value for key, value in document.items() if key != "_id"}
        yield {"_index": index, "_id": document["_id"], "_source": source}


async def import_catalog(es: Elasticsearch) -> int:
    path = ensure_data_file(settings.catalog_path, settings.catalog_source_url or None)
    catalog = await asyncio.to_thread(load_catalog, path)
    if not catalog.products:
        return 0
    actions = [
        *_iter_actions(settings.es_category_index, catalog.categories),
        *_iter_actions(settings.es_subcategory_index, catalog.subcategories),
        *_iter_actions(settings.es_index, catalog.products),
    ]
    await asyncio.to_thread(helpers.bulk, es, actions, refresh=True)
    return len(catalog.products)


async def import_if_empty(es: Elasticsearch) -> int:
    stats = await asyncio.to_thread(es.count, index=settings.es_index)
    if stats.get("count", 0) > 0:
        return 0
    try:
        return await import_catalog(es)
    except FileNotFoundError as exc:
        logger.warning("Skipping catalog import: %s", exc)
        return 0


async def reindex_data(es: Elasticsearch) -> int:
    from .indexing import drop_indices, ensure_indices

    await drop_indices(es)
    await ensure_indices(es)
    return await import_catalog(es)
