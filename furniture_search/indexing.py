"""Index creation and maintenance helpers."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import BadRequestError, NotFoundError

from .config import settings

logger = logging.getLogger(__name__)

# Categories and subcategories are only looked up by id for display.
REFERENCE_MAPPING = {
    "mappings": {
        "properties": {
            "name": {"type": "text", "fields": {"raw": {"type": "keyword"}}},
            "slug": {"type": "keyword"},
        }
    }
}


def _load_mapping(mapping_path: Path) -> dict:
    with mapping_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _all_indices() -> List[str]:
    return [settings.es_index, settings.es_category_index, settings.es_subcategory_index]


async def _create_index(es: Elasticsearch, index: str, body: dict) -> None:
    exists = await asyncio.to_thread(es.indices.exists, index=index)
    if exists:
        return
    logger.info("Creating index %s", index)
    try:
        await asyncio.to_thread(es.indices.create, index=index, body=body)
    except BadRequestError as exc:
        if getattr(exc, "error", "") == "resource_already_exists_exception":
            logger.info("Index %s already exists", index)
            return
        logger.exception("Failed to create index %s: %s", index, exc)
        raise


async def ensure_index(es: Elasticsearch) -> None:
    """Create the products index from the JSON mapping file if it is missing."""

    mapping_path = Path(settings.mapping_path)
    body = _load_mapping(mapping_path)
    logger.debug("Product mapping loaded from %s", mapping_path)
    await _create_index(es, settings.es_index, body)


async def ensure_indices(es: Elasticsearch) -> None:
    await ensure_index(es)
    for index in (settings.es_category_index, settings.es_subcategory_index):
        await _create_index(es, index, REFERENCE_MAPPING)


async def drop_indices(es: Elasticsearch) -> None:
    for index in _all_indices():
        try:
            await asyncio.to_thread(es.indices.delete, index=index)
        except NotFoundError:
            continue


async def index_is_empty(es: Elasticsearch) -> bool:
    try:
        stats = await asyncio.to_thread(es.count, index=settings.es_index)
        return stats.get("count", 0) == 0
    except NotFoundError:
        return True
