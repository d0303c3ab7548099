"""Elasticsearch client factory.

The catalog works against the official synchronous client; the search
orchestrator moves every call onto a worker thread with ``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from elasticsearch import Elasticsearch

from .config import settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30


@lru_cache(maxsize=1)
def get_client() -> Elasticsearch:
    logger.info("Connecting to Elasticsearch at %s (products index %s)", settings.es_host, settings.es_index)
    return Elasticsearch(
        settings.es_host,
        request_timeout=REQUEST_TIMEOUT_SECONDS,
        retry_on_timeout=True,
    )
