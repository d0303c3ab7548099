"""Relevance scoring plans evaluated in application code.

A plan is compiled once per request from the classified tokens, numerics and
intent, then applied to every published candidate document:

* :class:`SearchPlan` is the strict stage. It computes ``searchScore``,
  ``relevanceCategory``, ``intentMatch`` and ``sortPriority`` per product,
  drops candidates that fail the two-part gate and sorts the rest into a total
  order so pagination is deterministic.
* :class:`RelaxedPlan` is the second rung of the ladder: substring matching on
  name/tags/brand with a popularity-leaning score and no floor.

The weights mirror the storefront's historic aggregation pipeline, so changing
any constant here changes user-visible ranking.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import ClassifiedTokens, Intent, Numerics
from .vocabulary import DEFAULT_VOCABULARY, TypeProfile, Vocabulary

logger = logging.getLogger(__name__)

FIELD_WEIGHTS: Mapping[str, float] = {
    "name": 20,
    "brand": 12,
    "tags": 8,
    "description": 3,
    "material": 10,
    "colorOptions": 8,
    "category": 15,
    "subcategory": 12,
    "attributes": 10,
}

CATEGORY_BONUS: Mapping[str, float] = {"exact": 50, "high": 30, "medium": 15, "low": 5}

PRIMARY_MATCH_FACTOR = 5
REGULAR_NAME_FACTOR = 0.7 * 2
REGULAR_BRAND_FACTOR = 2
MODIFIER_MATCH_FACTOR = 3
SET_CONTEXT_BONUS = 1.5
BASE_SCORE_FLOOR = 0.1
SEATER_EXACT_BONUS = 10
SEATER_NEAR_BONUS = 3
IN_STOCK_MULTIPLIER = 1.2
OUT_OF_STOCK_MULTIPLIER = 0.3
FEATURED_MULTIPLIER = 1.15
RATING_MULTIPLIER = 0.1

STRICT_MIN_SCORE = 3.0
LENIENT_MIN_SCORE = 1.5
STRONG_KEYWORD_SCORE = 8.0
HIGH_CONFIDENCE = 0.8
MIN_INTENT_CONFIDENCE = 0.5
AVOID_PENALTY = -2.0
NEUTRAL_INTENT = 0.5

RELAXED_SEATER_BONUS = 5.0

# Degraded values when a scoring branch fails for one document.
NEUTRAL_SCORE = 1.0
GENERAL_CATEGORY = "general"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).lower()


def _lower_list(values: Any) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return [_text(value) for value in values if value is not None]


def _number(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _attribute(product: Mapping[str, Any], key: str) -> Any:
    attributes = product.get("attributes") or {}
    if not isinstance(attributes, Mapping):
        return None
    return attributes.get(key)


def reviews_average(product: Mapping[str, Any]) -> float:
    reviews = product.get("reviews")
    if isinstance(reviews, Mapping):
        return _number(reviews.get("average"))
    return 0.0


def is_featured(product: Mapping[str, Any]) -> bool:
    return product.get("isFeatured") is True


def has_stock(product: Mapping[str, Any]) -> bool:
    """Stock check used for scoring; an unknown quantity counts as in stock."""
    return _number(product.get("inStockQuantity"), default=1.0) > 0


def is_featured_or_in_stock(product: Mapping[str, Any]) -> bool:
    """Popularity fallback filter; here an unknown quantity is not in stock."""
    return is_featured(product) or _number(product.get("inStockQuantity")) > 0


def created_timestamp(product: Mapping[str, Any]) -> float:
    value = product.get("createdAt")
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
        except ValueError:
            return 0.0
    return 0.0


def product_id(product: Mapping[str, Any]) -> str:
    return str(product.get("_id") or product.get("id") or "")


def popularity_fallback_key(product: Mapping[str, Any]) -> Tuple:
    """Sort key for the popularity list: featured, rating, newest, id."""
    return (
        -int(is_featured(product)),
        -reviews_average(product),
        -created_timestamp(product),
        product_id(product),
    )


def rank_sort_key(product: Mapping[str, Any]) -> Tuple:
    return (
        -_number(product.get("sortPriority")),
        -_number(product.get("searchScore")),
        -int(is_featured(product)),
        -reviews_average(product),
        -created_timestamp(product),
        product_id(product),
    )


def _name_contains(name: str, tokens: Iterable[str]) -> bool:
    return any(token in name for token in tokens)


def _seater_value(product: Mapping[str, Any]) -> float:
    return _number(_attribute(product, "seater"))


@dataclass(frozen=True)
class SearchPlan:
    """Compiled strict-stage scoring for one query."""

    classified: ClassifiedTokens
    numerics: Numerics
    intent: Intent
    profile: Optional[TypeProfile]
    has_terms: bool

    @property
    def min_score(self) -> float:
        return STRICT_MIN_SCORE if self.intent.confidence > HIGH_CONFIDENCE else LENIENT_MIN_SCORE

    def _base_score(self, product: Mapping[str, Any]) -> float:
        name = _text(product.get("name"))
        tags = _lower_list(product.get("tags"))
        brand = _text(product.get("brand"))
        material = _text(product.get("material"))
        attribute_material = _text(_attribute(product, "material"))
        colors = _lower_list(product.get("colorOptions"))
        attribute_color = _text(_attribute(product, "color"))

        total = 0.0
        for token in self.classified.primary:
            if token in name or token in tags:
                total += FIELD_WEIGHTS["name"] * PRIMARY_MATCH_FACTOR

        for token in self.classified.regular:
            if token in name:
                total += FIELD_WEIGHTS["name"] * REGULAR_NAME_FACTOR
            if token in brand:
                total += FIELD_WEIGHTS["brand"] * REGULAR_BRAND_FACTOR

        for token in self.classified.modifiers:
            if token in material or token in attribute_material:
                total += FIELD_WEIGHTS["material"] * MODIFIER_MATCH_FACTOR
            if token in colors or token == attribute_color:
                total += FIELD_WEIGHTS["colorOptions"] * MODIFIER_MATCH_FACTOR

        # "set" only counts next to a real term, e.g. "sofa set".
        context_tokens = [*self.classified.primary, *self.classified.regular]
        for token in self.classified.stopWords:
            if token == "set" and token in name and _name_contains(name, context_tokens):
                total += SET_CONTEXT_BONUS

        return total or BASE_SCORE_FLOOR

    def context_score(self, product: Mapping[str, Any]) -> float:
        try:
            score = self._base_score(product)
            seater = self.numerics.seater
            if seater:
                value = _seater_value(product)
                if value == seater:
                    score += SEATER_EXACT_BONUS
                elif seater - 1 <= value <= seater + 1:
                    score += SEATER_NEAR_BONUS
            stock = IN_STOCK_MULTIPLIER if has_stock(product) else OUT_OF_STOCK_MULTIPLIER
            featured = FEATURED_MULTIPLIER if is_featured(product) else 1.0
            rating = 1 + reviews_average(product) * RATING_MULTIPLIER
            return score * stock * featured * rating
        except Exception:
            logger.exception("context_score failed for product %s", product_id(product))
            return NEUTRAL_SCORE

    def relevance_category(self, product: Mapping[str, Any]) -> str:
        try:
            name = _text(product.get("name"))
            if _name_contains(name, self.classified.primary):
                return "exact"
            if self.profile and self.intent.confidence > HIGH_CONFIDENCE and _name_contains(name, self.profile.primary):
                return "high"
            if self.classified.regular:
                tags = _lower_list(product.get("tags"))
                for token in self.classified.regular:
                    if token in name or token in tags:
                        return "medium"
            return "low"
        except Exception:
            logger.exception("relevance_category failed for product %s", product_id(product))
            return GENERAL_CATEGORY

    def intent_match(self, product: Mapping[str, Any]) -> float:
        if not self.intent.primaryType or self.intent.confidence < MIN_INTENT_CONFIDENCE or not self.profile:
            return 0.0
        try:
            name = _text(product.get("name"))
            if _name_contains(name, self.profile.primary):
                return self.intent.confidence * 3
            if _name_contains(name, self.profile.avoid):
                return AVOID_PENALTY
            return NEUTRAL_INTENT
        except Exception:
            logger.exception("intent_match failed for product %s", product_id(product))
            return 0.0

    @staticmethod
    def popularity_score(product: Mapping[str, Any]) -> float:
        views = max(_number(product.get("viewCount")), 0.0)
        return math.log(views + 1) * 0.3 + (2.0 if is_featured(product) else 0.0) + reviews_average(product) * 0.4

    def passes_gate(self, score: float, category: str, intent_match: float) -> bool:
        if score <= self.min_score:
            return False
        return intent_match >= 1 or (score > STRONG_KEYWORD_SCORE and category in ("exact", "high"))

    def evaluate(self, product: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Annotate one product, or return ``None`` when it fails the gate."""
        if self.has_terms:
            score = self.context_score(product)
            category = self.relevance_category(product)
            intent_match = self.intent_match(product)
            if not self.passes_gate(score, category, intent_match):
                return None
        else:
            score = self.popularity_score(product)
            category = GENERAL_CATEGORY
            intent_match = 0.0

        priority = intent_match * 100 + CATEGORY_BONUS.get(category, 0) + score * 2
        return {
            **product,
            "searchScore": score,
            "relevanceCategory": category,
            "intentMatch": intent_match,
            "sortPriority": priority,
        }

    def rank(self, products: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        scored = [annotated for annotated in map(self.evaluate, products) if annotated is not None]
        scored.sort(key=rank_sort_key)
        return scored


def build_search_plan(
    tokens: List[str],
    classified: ClassifiedTokens,
    numerics: Numerics,
    intent: Intent,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> SearchPlan:
    """Compile the strict plan; a browse plan is returned when there are no terms."""
    has_terms = bool(tokens) or not numerics.is_empty()
    try:
        profile = vocabulary.profile(intent.primaryType)
        return SearchPlan(classified, numerics, intent, profile, has_terms)
    except Exception:
        logger.exception("build_search_plan failed, using browse ordering")
        return SearchPlan(ClassifiedTokens(), Numerics(), Intent(), None, False)


@dataclass(frozen=True)
class RelaxedPlan:
    """Substring matching with a popularity-leaning score and no floor."""

    name_tokens: Tuple[str, ...]
    regular_tokens: Tuple[str, ...]
    seater: Optional[int] = None

    def matches(self, product: Mapping[str, Any]) -> bool:
        if not self.name_tokens and not self.regular_tokens:
            return True
        name = _text(product.get("name"))
        if _name_contains(name, self.name_tokens):
            return True
        tags = _lower_list(product.get("tags"))
        brand = _text(product.get("brand"))
        for token in self.regular_tokens:
            if token in brand or any(token in tag for tag in tags):
                return True
        return False

    def score(self, product: Mapping[str, Any]) -> float:
        sold = max(_number(product.get("totalSold")), 0.0)
        score = math.log(sold + 1) * 0.3
        score += 2.0 if is_featured(product) else 0.0
        score += 1.0 if has_stock(product) else 0.0
        if self.seater and _seater_value(product) == self.seater:
            score += RELAXED_SEATER_BONUS
        return score

    def rank(self, products: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        scored = [{**product, "searchScore": self.score(product)} for product in products if self.matches(product)]
        scored.sort(key=lambda item: (-item["searchScore"], -created_timestamp(item), product_id(item)))
        return scored


def build_relaxed_plan(classified: ClassifiedTokens, numerics: Numerics) -> RelaxedPlan:
    """Name terms are the primary tokens, or the first two regular tokens."""
    name_tokens = classified.primary or classified.regular[:2]
    return RelaxedPlan(tuple(name_tokens), tuple(classified.regular), numerics.seater)
