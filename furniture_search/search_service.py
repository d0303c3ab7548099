"""Search orchestration with a progressively relaxed fallback ladder.

One request walks these stages:

    NORMALIZE -> EXTRACT -> CLASSIFY -> RESOLVE_INTENT -> BUILD_PIPELINE
    -> STRICT -> (no matches) RELAXED -> (still nothing) POPULARITY

A failure in the strict stage is treated exactly like an empty strict result,
a failure in the relaxed stage drops to the flat featured/in-stock listing,
and anything else is caught at the top so :meth:`SearchService.search` always
returns a well-formed :class:`~furniture_search.models.SearchResult`.
"""
from __future__ import annotations

import asyncio
import logging
import math
from time import perf_counter
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .catalog import Catalog
from .classifier import classify_tokens
from .config import Settings, settings as default_settings
from .intent import determine_intent
from .models import ClassifiedTokens, Intent, Numerics, SearchResult, SearchStage
from .normalizer import apply_synonyms, tokenize
from .numerics import extract_numerics
from .scoring import build_relaxed_plan, build_search_plan
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Search temporarily unavailable"
WEAK_MATCH_SCORE = 3


class StageOutcome(NamedTuple):
    products: List[Dict[str, Any]]
    total: int
    stage: Optional[SearchStage]

    @property
    def matched(self) -> bool:
        return self.stage in (SearchStage.STRICT, SearchStage.RELAXED)


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _is_weak_match(product: Dict[str, Any]) -> bool:
    score = product.get("searchScore")
    return score is None or score < WEAK_MATCH_SCORE


class SearchService:
    def __init__(
        self,
        catalog: Catalog,
        *,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        config: Optional[Settings] = None,
    ) -> None:
        self.catalog = catalog
        self.vocabulary = vocabulary
        self.settings = config or default_settings

    def sanitize_pagination(self, page: Any, page_size: Any) -> Tuple[int, int]:
        """Clamp pagination; a missing, invalid or zero page size means the default."""
        page_number = max(1, _coerce_int(page) or 1)
        size = _coerce_int(page_size) or self.settings.default_page_size
        size = min(self.settings.max_page_size, max(1, size))
        return page_number, size

    async def search(self, query: Any, page: Any = 1, page_size: Any = None) -> SearchResult:
        raw_query = query if isinstance(query, str) else ""
        page_number, size = 1, self.settings.default_page_size
        try:
            page_number, size = self.sanitize_pagination(page, page_size)

            t0 = perf_counter()
            tokens = tokenize(raw_query, self.vocabulary)
            synonym_tokens = apply_synonyms(tokens, self.vocabulary)
            extraction = extract_numerics(synonym_tokens)
            classified = classify_tokens(extraction.tokens, self.vocabulary)
            intent = determine_intent(classified, extraction.numerics, self.vocabulary)
            t1 = perf_counter()

            outcome = await self._execute(extraction.tokens, classified, extraction.numerics, intent, page_number, size)
            t2 = perf_counter()

            total = outcome.total
            result = SearchResult(
                query=raw_query,
                normalized=" ".join(extraction.tokens),
                classified=classified,
                intent=intent,
                numerics=extraction.numerics,
                primaryType=intent.primaryType,
                products=outcome.products,
                page=page_number,
                pageSize=size,
                total=total,
                hasMore=page_number * size < total,
                totalPages=math.ceil(total / size),
                fallback=total > 0 and bool(extraction.tokens) and any(map(_is_weak_match, outcome.products)),
                noResults=not outcome.matched,
                stage=outcome.stage,
            )
            logger.info(
                "timing: total=%.2fms analyze=%.2fms execute=%.2fms q=%r stage=%s intent=%s confidence=%.2f hits=%s total_hits=%s",
                (t2 - t0) * 1000,
                (t1 - t0) * 1000,
                (t2 - t1) * 1000,
                raw_query,
                outcome.stage.value if outcome.stage else None,
                intent.primaryType,
                intent.confidence,
                len(outcome.products),
                total,
            )
            return result
        except Exception:
            logger.exception("Complete search failure for q=%r", raw_query)
            return SearchResult(query=raw_query, page=page_number, pageSize=size, error=UNAVAILABLE_MESSAGE)

    async def _execute(
        self,
        tokens: List[str],
        classified: ClassifiedTokens,
        numerics: Numerics,
        intent: Intent,
        page: int,
        page_size: int,
    ) -> StageOutcome:
        skip = (page - 1) * page_size
        candidates: Optional[List[Dict[str, Any]]] = None
        ranked: List[Dict[str, Any]] = []

        try:
            candidates, published = await asyncio.gather(
                asyncio.to_thread(self.catalog.find_published),
                asyncio.to_thread(self.catalog.count_published),
            )
            if not published:
                logger.info("Catalog has no published products")
                return StageOutcome([], 0, None)
            plan = build_search_plan(tokens, classified, numerics, intent, self.vocabulary)
            ranked = plan.rank(candidates)
        except Exception:
            logger.warning("Strict search failed, trying relaxed search", exc_info=True)

        if ranked:
            return await self._paginate(ranked, skip, page_size, SearchStage.STRICT)

        if classified.primary or classified.regular:
            logger.info("No strict results for %s, trying relaxed search", tokens)
            try:
                if candidates is None:
                    candidates = await asyncio.to_thread(self.catalog.find_published)
                relaxed = build_relaxed_plan(classified, numerics).rank(candidates)
                if relaxed:
                    return await self._paginate(relaxed, skip, page_size, SearchStage.RELAXED)
            except Exception:
                logger.warning("Relaxed search failed, using fallback listing", exc_info=True)
                flat = await self._featured_or_in_stock(self.settings.fallback_limit)
                if flat:
                    return StageOutcome(flat, len(flat), SearchStage.FALLBACK)

        logger.info("No matches for %s, returning popular products", tokens)
        popular = await self._featured_or_in_stock(page_size)
        return StageOutcome(popular, len(popular), SearchStage.POPULARITY if popular else None)

    async def _paginate(
        self,
        ranked: List[Dict[str, Any]],
        skip: int,
        page_size: int,
        stage: SearchStage,
    ) -> StageOutcome:
        page_items = await self._enrich(ranked[skip : skip + page_size])
        return StageOutcome(page_items, len(ranked), stage)

    async def _featured_or_in_stock(self, limit: int) -> List[Dict[str, Any]]:
        try:
            products = await asyncio.to_thread(self.catalog.find_featured_or_in_stock, limit)
        except Exception:
            logger.exception("Popularity listing failed")
            return []
        return await self._enrich(products)

    async def _enrich(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not products:
            return products
        try:
            return await asyncio.to_thread(self.catalog.enrich, products)
        except Exception:
            logger.warning("Category enrichment failed", exc_info=True)
            return products
