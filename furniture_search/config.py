"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_index: str = _get_env("ES_INDEX", "products")
    es_category_index: str = _get_env("ES_CATEGORY_INDEX", "categories")
    es_subcategory_index: str = _get_env("ES_SUBCATEGORY_INDEX", "subcategories")
    mapping_path: str = _get_env("MAPPING_PATH", "config/product-mapping.json")
    catalog_path: str = _get_env("CATALOG_PATH", "catalog.json")
    catalog_source_url: str = _get_env("CATALOG_SOURCE_URL", "")
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    search_cache_ttl_seconds: int = int(_get_env("SEARCH_CACHE_TTL_SECONDS", "300"))
    suggestion_cache_ttl_seconds: int = int(_get_env("SUGGESTION_CACHE_TTL_SECONDS", "600"))
    search_cache_max_entries: int = int(_get_env("SEARCH_CACHE_MAX_ENTRIES", "100"))
    suggestion_cache_max_entries: int = int(_get_env("SUGGESTION_CACHE_MAX_ENTRIES", "200"))
    default_page_size: int = int(_get_env("DEFAULT_PAGE_SIZE", "24"))
    max_page_size: int = int(_get_env("MAX_PAGE_SIZE", "60"))
    max_query_length: int = int(_get_env("MAX_QUERY_LENGTH", "200"))
    # Upper bound on published documents pulled into a single scoring pass.
    candidate_limit: int = int(_get_env("CANDIDATE_LIMIT", "10000"))
    fallback_limit: int = int(_get_env("FALLBACK_LIMIT", "12"))
    load_on_startup: bool = _get_env("LOAD_ON_STARTUP", "true").lower() in {"1", "true", "yes"}
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
