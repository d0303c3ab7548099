"""Query suggestions and "did you mean" corrections.

Suggestions are generated from curated phrase lists rather than the catalog:

* :func:`instant_suggestions` answers short, as-you-type queries with prefix
  and substring matches.
* :func:`smart_suggestions` reads furniture/seater/material/color/room hints
  from longer queries and expands phrase templates around them.
* :func:`did_you_mean` maps misspelled or zero-result queries onto a small
  correction table using containment, edit distance and double metaphone.
"""
from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Set

from metaphone import doublemetaphone

from .models import DidYouMean, SuggestionSet

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 8
MIN_SUGGESTIONS = 6
PREFIX_SCORE = 10
PARTIAL_SCORE = 5
MAX_CORRECTIONS = 3
MAX_EDIT_DISTANCE = 2

SUGGESTION_CATEGORIES = MappingProxyType(
    {
        "trending": (
            "3 seater sofa",
            "dining table",
            "office chair",
            "king size bed",
            "wooden cabinet",
            "leather sofa",
            "study table",
            "wardrobe",
            "coffee table",
            "recliner chair",
        ),
        "popular_searches": (
            "sofa set",
            "dining table 6 seater",
            "office chair ergonomic",
            "wooden bed",
            "glass table",
            "fabric sofa",
            "steel almirah",
            "corner sofa",
            "folding table",
            "computer chair",
        ),
        "furniture_types": (
            "sofa",
            "chair",
            "table",
            "bed",
            "cabinet",
            "wardrobe",
            "dining set",
            "office furniture",
            "bedroom furniture",
            "living room furniture",
        ),
        "by_room": (
            "living room furniture",
            "bedroom furniture",
            "office furniture",
            "dining room furniture",
            "kitchen furniture",
            "study room furniture",
        ),
        "by_material": (
            "wooden furniture",
            "metal furniture",
            "glass furniture",
            "leather furniture",
            "fabric furniture",
            "plastic furniture",
        ),
    }
)

SUGGESTION_FURNITURE = ("sofa", "chair", "table", "bed", "cabinet", "wardrobe")
SUGGESTION_MATERIALS = ("wood", "wooden", "metal", "glass", "leather", "fabric")
SUGGESTION_COLORS = ("black", "white", "brown", "gray", "grey", "blue", "red")
SUGGESTION_ROOMS = ("living", "dining", "bedroom", "office", "kitchen")

ROOM_FURNITURE = MappingProxyType(
    {
        "living": ("sofa", "coffee table", "tv unit", "recliner"),
        "dining": ("dining table", "dining chair", "dining set"),
        "bedroom": ("bed", "wardrobe", "dresser", "nightstand"),
        "office": ("office chair", "desk", "filing cabinet"),
        "kitchen": ("kitchen cabinet", "dining table", "bar stool"),
    }
)

POPULAR_VARIANTS = MappingProxyType(
    {
        "sofa": (
            "2 seater sofa",
            "3 seater sofa",
            "4 seater sofa",
            "5 seater sofa",
            "sofa cum bed",
            "corner sofa",
            "leather sofa",
            "fabric sofa",
        ),
        "table": ("dining table", "coffee table", "study table", "center table"),
        "chair": (
            "dining chair",
            "office chair",
            "accent chair",
            "recliner chair",
            "rocking chair",
            "folding chair",
        ),
        "bed": (
            "king size bed",
            "queen size bed",
            "single bed",
            "double bed",
            "wooden bed",
            "storage bed",
            "bunk bed",
            "sofa cum bed",
        ),
    }
)

CORRECTIONS = MappingProxyType(
    {
        "sofa": ("sofa set", "sofa bed", "corner sofa", "leather sofa", "fabric sofa"),
        "couch": ("sofa", "sectional sofa", "loveseat", "recliner"),
        "chair": ("dining chair", "office chair", "accent chair", "armchair", "recliner chair"),
        "table": ("dining table", "coffee table", "side table", "console table", "center table"),
        "bed": ("king size bed", "queen bed", "single bed", "double bed", "bed with storage"),
        "mattress": ("memory foam mattress", "spring mattress", "orthopedic mattress"),
        "wardrobe": ("wardrobe with mirror", "3 door wardrobe", "sliding wardrobe"),
        "dresser": ("chest of drawers", "dressing table", "bedside table"),
        "dining": ("dining table", "dining set", "dining chair", "6 seater dining"),
        "desk": ("study table", "office desk", "computer table", "writing desk"),
        "office": ("office chair", "office table", "filing cabinet", "office furniture"),
        "cabinet": ("kitchen cabinet", "storage cabinet", "display cabinet", "tv cabinet"),
        "shelf": ("bookshelf", "wall shelf", "display shelf", "storage shelf"),
        "drawer": ("chest of drawers", "bedside table", "storage drawer"),
        "wood": ("wooden furniture", "teak wood", "sheesham wood", "oak wood"),
        "metal": ("metal furniture", "steel furniture", "iron furniture"),
        "leather": ("leather sofa", "leather chair", "leather furniture"),
        "fabric": ("fabric sofa", "fabric chair", "upholstered furniture"),
        "modern": ("modern furniture", "contemporary furniture", "minimalist furniture"),
        "classic": ("classic furniture", "traditional furniture", "vintage furniture"),
        "luxury": ("luxury furniture", "premium furniture", "designer furniture"),
        # common misspellings
        "soffa": ("sofa", "sofa set"),
        "chai": ("chair", "dining chair"),
        "tebal": ("table", "dining table"),
        "bead": ("bed", "king size bed"),
        "draw": ("drawer", "chest of drawers"),
        "cuboard": ("cupboard", "wardrobe"),
        "almari": ("wardrobe", "almirah"),
        "almira": ("wardrobe", "almirah"),
        "diwan": ("divan", "daybed"),
        "centre": ("center table", "coffee table"),
        "dinning": ("dining table", "dining set"),
        "matress": ("mattress", "memory foam mattress"),
        "wadrobe": ("wardrobe", "wardrobe with mirror"),
        "3 seater": ("3 seater sofa", "sofa set 3 seater"),
        "2 seater": ("2 seater sofa", "loveseat"),
        "6 seater": ("6 seater dining table", "dining set 6 seater"),
        "4 seater": ("4 seater dining table", "dining set 4 seater"),
        "king": ("king size bed", "king bed"),
        "queen": ("queen size bed", "queen bed"),
        "single": ("single bed", "single seater"),
        "double": ("double bed", "double seater"),
        "bedroom": ("bed", "wardrobe", "dressing table", "bedside table"),
        "livingroom": ("sofa", "coffee table", "tv unit", "center table"),
        "kitchen": ("dining table", "kitchen cabinet", "bar stool"),
        "bathroom": ("bathroom cabinet", "mirror cabinet", "storage cabinet"),
        "balcony": ("outdoor furniture", "garden furniture", "patio set"),
    }
)

FALLBACK_CORRECTIONS = ("sofa", "bed", "dining table", "wardrobe", "office chair", "bookshelf")

_SEATER_TOKEN_RE = re.compile(r"(\d+)seater?")


def _all_phrases() -> Iterable[str]:
    for phrases in SUGGESTION_CATEGORIES.values():
        yield from phrases


def _unique(items: Iterable[str], limit: int) -> List[str]:
    # dict preserves first-seen order
    return list(dict.fromkeys(items))[:limit]


def should_call_api(query: Optional[str]) -> bool:
    """Whether a query is long enough to deserve server-side smart suggestions."""
    if not query or len(query) < 3:
        return False
    if len(query) > 15:
        return True
    return len(query.lower().split()) > 3


def instant_suggestions(query: Optional[str]) -> SuggestionSet:
    try:
        normalized = (query or "").lower().strip()
        if not normalized:
            return SuggestionSet(type="trending", suggestions=list(SUGGESTION_CATEGORIES["trending"][:MAX_SUGGESTIONS]))

        if len(normalized) < 2:
            popular = [s for s in SUGGESTION_CATEGORIES["popular_searches"] if s.startswith(normalized)]
            return SuggestionSet(type="popular", suggestions=popular[:MIN_SUGGESTIONS])

        scored: Dict[str, int] = {}
        for phrase in _all_phrases():
            if phrase.startswith(normalized):
                scored.setdefault(phrase, PREFIX_SCORE)
        if len(scored) < MIN_SUGGESTIONS:
            for phrase in _all_phrases():
                if normalized in phrase:
                    scored.setdefault(phrase, PARTIAL_SCORE)

        ranked = sorted(scored, key=lambda phrase: -scored[phrase])
        return SuggestionSet(type="instant", suggestions=ranked[:MAX_SUGGESTIONS])
    except Exception:
        logger.exception("instant_suggestions failed for %r", query)
        return SuggestionSet(type="trending", suggestions=list(SUGGESTION_CATEGORIES["trending"][:5]))


def detect_suggestion_intent(tokens: Iterable[str]) -> Dict[str, object]:
    """Pick the most specific template family the tokens support."""

    furniture = seater = material = color = room = None
    for token in tokens:
        if token in SUGGESTION_FURNITURE:
            furniture = token
        match = _SEATER_TOKEN_RE.search(token)
        if match:
            seater = int(match.group(1))
        elif token.isdigit() and int(token) <= 10:
            seater = int(token)
        if token in SUGGESTION_MATERIALS:
            material = "wood" if token == "wooden" else token
        if token in SUGGESTION_COLORS:
            color = token
        if token in SUGGESTION_ROOMS:
            room = token

    if furniture and seater:
        return {"type": "furniture_with_seater", "furniture": furniture, "seater": seater}
    if furniture and material:
        return {"type": "furniture_with_material", "furniture": furniture, "material": material}
    if furniture and color:
        return {"type": "furniture_with_color", "furniture": furniture, "color": color}
    if room:
        return {"type": "room_furniture", "room": room}
    if furniture:
        return {"type": "general_furniture", "furniture": furniture}
    return {"type": "general"}


def add_seater_suggestions(out: Dict[str, None], furniture: str, seater: int) -> None:
    for count in (seater - 1, seater, seater + 1):
        if not 0 < count <= 8:
            continue
        out[f"{count} seater {furniture}"] = None
        out[f"{furniture} {count} seater"] = None
        if furniture == "sofa":
            out[f"{count} seater sofa set"] = None
            out[f"{count} seater sectional"] = None
    for material in ("leather", "fabric", "wooden"):
        out[f"{seater} seater {material} {furniture}"] = None


def add_material_suggestions(out: Dict[str, None], furniture: str, material: str) -> None:
    out[f"{material} {furniture}"] = None
    out[f"{furniture} {material}"] = None
    if furniture == "sofa":
        out[f"{material} sofa set"] = None
        for count in ("2", "3", "4"):
            out[f"{count} seater {material} sofa"] = None
    if furniture == "table":
        out[f"{material} dining table"] = None
        out[f"{material} coffee table"] = None


def add_color_suggestions(out: Dict[str, None], furniture: str, color: str) -> None:
    out[f"{color} {furniture}"] = None
    out[f"{furniture} {color}"] = None
    if furniture == "sofa":
        out[f"{color} sofa set"] = None
        out[f"{color} leather sofa"] = None


def add_room_suggestions(out: Dict[str, None], room: str) -> None:
    for item in ROOM_FURNITURE.get(room, ()):
        out[item] = None
        out[f"{room} room {item}"] = None


def add_general_suggestions(out: Dict[str, None], furniture: str) -> None:
    out[furniture] = None
    out[f"{furniture} set"] = None
    for variant in POPULAR_VARIANTS.get(furniture, ()):
        out[variant] = None


def smart_suggestions(query: Optional[str]) -> SuggestionSet:
    try:
        normalized = (query or "").lower().strip()
        if not normalized:
            return SuggestionSet(type="trending", suggestions=list(SUGGESTION_CATEGORIES["trending"]))

        intent = detect_suggestion_intent(normalized.split())
        kind = intent["type"]
        # ordered set of phrases
        out: Dict[str, None] = {}
        if kind == "furniture_with_seater":
            add_seater_suggestions(out, intent["furniture"], intent["seater"])
        elif kind == "furniture_with_material":
            add_material_suggestions(out, intent["furniture"], intent["material"])
        elif kind == "furniture_with_color":
            add_color_suggestions(out, intent["furniture"], intent["color"])
        elif kind == "room_furniture":
            add_room_suggestions(out, intent["room"])
        elif kind == "general_furniture":
            add_general_suggestions(out, intent["furniture"])
        else:
            return instant_suggestions(query)

        if len(out) < MIN_SUGGESTIONS:
            for trend in SUGGESTION_CATEGORIES["trending"]:
                if len(out) >= MAX_SUGGESTIONS:
                    break
                out[trend] = None

        logger.debug("smart_suggestions q=%r intent=%s count=%s", query, intent, len(out))
        return SuggestionSet(type=kind, suggestions=list(out)[:MAX_SUGGESTIONS])
    except Exception:
        logger.exception("smart_suggestions failed for %r", query)
        return instant_suggestions(query)


def _damerau_levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    len_a = len(a)
    len_b = len(b)
    dist = [[0] * (len_b + 1) for _ in range(len_a + 1)]
    for i in range(len_a + 1):
        dist[i][0] = i
    for j in range(len_b + 1):
        dist[0][j] = j
    for i in range(1, len_a + 1):
        for j in range(1, len_b + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            dist[i][j] = min(dist[i - 1][j] + 1, dist[i][j - 1] + 1, dist[i - 1][j - 1] + cost)
            # adjacent transposition ("sofa" / "sfoa")
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                dist[i][j] = min(dist[i][j], dist[i - 2][j - 2] + cost)
    return dist[len_a][len_b]


def _phonetic_codes(text: str) -> Set[str]:
    compact = "".join(text.split())
    if not compact.isalpha():
        return set()
    return {code for code in doublemetaphone(compact) if code}


def _fallback() -> DidYouMean:
    return DidYouMean(suggestions=list(FALLBACK_CORRECTIONS[:MAX_CORRECTIONS]), isFallback=True)


def did_you_mean(query: object) -> DidYouMean:
    """Suggest up to three corrected queries for a query that matched nothing.

    Tried in order, stopping at the first strategy that yields anything:

    1. exact key of :data:`CORRECTIONS`;
    2. key contained in the query or query contained in a key;
    3. Damerau-Levenshtein distance of at most two to a key longer than two
       characters;
    4. same double metaphone code as a key (``"kabbinett"`` -> ``"cabinet"``).

    When nothing matches the fixed :data:`FALLBACK_CORRECTIONS` are returned
    with ``isFallback`` set.
    """

    if not isinstance(query, str):
        return _fallback()
    normalized = query.lower().strip()
    if not normalized:
        return _fallback()

    try:
        if normalized in CORRECTIONS:
            return DidYouMean(suggestions=list(CORRECTIONS[normalized][:MAX_CORRECTIONS]))

        matches: List[str] = []
        for key, items in CORRECTIONS.items():
            if key in normalized or normalized in key:
                matches.extend(items)

        if not matches:
            for key, items in CORRECTIONS.items():
                if len(key) > 2 and _damerau_levenshtein(normalized, key) <= MAX_EDIT_DISTANCE:
                    matches.extend(items)

        if not matches:
            codes = _phonetic_codes(normalized)
            if codes:
                for key, items in CORRECTIONS.items():
                    if len(key) > 2 and codes & _phonetic_codes(key):
                        matches.extend(items)

        unique = _unique(matches, MAX_CORRECTIONS)
        logger.debug("did_you_mean q=%r -> %s", query, unique)
        if unique:
            return DidYouMean(suggestions=unique)
    except Exception:
        logger.exception("did_you_mean failed for %r", query)
    return _fallback()
