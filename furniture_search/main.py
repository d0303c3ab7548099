"""FastAPI application wiring the search service."""
from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response

from .cache import SearchCache, get_cache
from .catalog import ElasticsearchCatalog
from .config import settings
from .es_client import get_client
from .importer import import_if_empty, reindex_data
from .indexing import ensure_indices, index_is_empty
from .models import SearchRequest, SearchResponse, SuggestionPayload, SuggestResponse
from .search_service import SearchService
from .suggestions import did_you_mean, instant_suggestions, should_call_api, smart_suggestions

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# force=True replaces uvicorn's default handlers so pipeline debug lines show.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Furniture Search Service")


@lru_cache(maxsize=1)
def get_search_service() -> SearchService:
    return SearchService(ElasticsearchCatalog(get_client()))


def get_search_cache() -> SearchCache:
    return get_cache()


@app.on_event("startup")
async def startup_event() -> None:
    es = get_client()
    await ensure_indices(es)
    if settings.load_on_startup:
        imported = await import_if_empty(es)
        if imported:
            logger.info("Imported %s products on startup", imported)


@app.get("/health")
async def health(cache: SearchCache = Depends(get_search_cache)) -> dict:
    es = get_client()
    status = await asyncio.to_thread(es.cluster.health)
    empty = await index_is_empty(es)
    return {
        "elasticsearch": status.get("status"),
        "index": settings.es_index,
        "empty": empty,
        "cache": cache.stats(),
    }


async def _run_search(
    response: Response,
    service: SearchService,
    cache: SearchCache,
    q: str,
    page: Any,
    page_size: Any,
) -> SearchResponse:
    query = (q or "").strip()
    if len(query) > settings.max_query_length:
        raise HTTPException(status_code=400, detail="Query too long")

    page_number, size = service.sanitize_pagination(page, page_size)
    cached = await asyncio.to_thread(cache.get_search, query, page_number, size)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        response.headers["X-Cache-Hits"] = str(cached.hits)
        response.headers["X-Cache-Age"] = f"{cached.age_seconds:.0f}"
        return SearchResponse(**{**cached.data, "fromCache": True, "cacheHits": cached.hits})

    result = await service.search(query, page_number, size)
    payload = SearchResponse(**result.model_dump())
    if result.noResults:
        payload.didYouMean = did_you_mean(query).suggestions

    await asyncio.to_thread(cache.set_search, query, page_number, size, payload.model_dump(mode="json"))
    response.headers["X-Cache"] = "MISS"
    response.headers["X-Search-Type"] = result.primaryType or "general"
    response.headers["X-Search-Fallback"] = "1" if result.fallback else "0"
    return payload


@app.get("/search", response_model=SearchResponse)
async def search(
    response: Response,
    q: str = Query("", description="Search query"),
    page: Optional[str] = Query(None, description="1-based page number"),
    pageSize: Optional[str] = Query(None, description="Results per page (1-60)"),
    service: SearchService = Depends(get_search_service),
    cache: SearchCache = Depends(get_search_cache),
) -> SearchResponse:
    return await _run_search(response, service, cache, q, page, pageSize)


@app.post("/search", response_model=SearchResponse)
async def search_post(
    body: SearchRequest,
    response: Response,
    service: SearchService = Depends(get_search_service),
    cache: SearchCache = Depends(get_search_cache),
) -> SearchResponse:
    return await _run_search(response, service, cache, body.q, body.page, body.pageSize)


@app.get("/search/suggest", response_model=SuggestResponse)
async def suggest(
    response: Response,
    q: str = Query("", description="Partial query"),
    cache: SearchCache = Depends(get_search_cache),
) -> SuggestResponse:
    query = (q or "").strip()
    if len(query) > settings.max_query_length:
        raise HTTPException(status_code=400, detail="Query too long")

    if not should_call_api(query):
        instant = instant_suggestions(query)
        response.headers["X-Cache"] = "CLIENT"
        return SuggestResponse(
            suggestions=SuggestionPayload(
                queries=instant.suggestions,
                trending=instant.suggestions if instant.type == "trending" else [],
            ),
            fromCache=True,
            type=instant.type,
        )

    cached = await asyncio.to_thread(cache.get_suggestions, query)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        response.headers["X-Cache-Hits"] = str(cached.hits)
        return SuggestResponse(**{**cached.data, "fromCache": True})

    smart = smart_suggestions(query)
    payload = SuggestResponse(
        suggestions=SuggestionPayload(
            queries=smart.suggestions,
            trending=smart.suggestions if smart.type == "trending" else [],
        ),
        type=smart.type,
    )
    await asyncio.to_thread(cache.set_suggestions, query, payload.model_dump(mode="json"))
    response.headers["X-Cache"] = "MISS"
    return payload


@app.post("/reindex")
async def reindex() -> dict:
    es = get_client()
    count = await reindex_data(es)
    return {"indexed": count}
