"""Query tokenization and lexical normalization.

Two steps run before any classification:

    1) :func:`tokenize` folds the raw query to lowercase ASCII, strips
       punctuation (hyphens survive long enough to act as separators), splits,
       de-duplicates and folds plurals (``"sofas"`` -> ``"sofa"``).
    2) :func:`apply_synonyms` maps colloquial aliases onto catalog vocabulary
       (``"couch"`` -> ``"sofa"``).

Both helpers are fail-open: malformed input or an unexpected error yields an
empty or unchanged token list rather than an exception, and the orchestrator
treats an empty list as a browse request with no search terms.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from unidecode import unidecode

from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

# Keep ASCII word characters, whitespace and hyphens only.
_DISALLOWED_RE = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")
_SPLIT_RE = re.compile(r"[\s,\-]+")


def _dedupe(tokens: Iterable[str]) -> List[str]:
    seen = set()
    unique: List[str] = []
    for token in tokens:
        if token in seen:
            continue
        seen.add(token)
        unique.append(token)
    return unique


def _fold_ascii(raw: str) -> str:
    return "".join(
        ch if ch.isascii() else unidecode(ch) if ch.isalpha() else " "
        for ch in raw
    )


def tokenize(raw: object, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> List[str]:
    """Split a raw query into normalized, de-duplicated tokens.

    Steps:

    1. Transliterate non-ASCII letters with ``unidecode`` and lowercase
       (``"Café Chairs"`` -> ``"cafe chairs"``). Any other non-ASCII character
       becomes a space, so ``"½"`` never turns into the digits ``"1/2"``.
    2. Replace everything except word characters, whitespace and hyphens with
       a space, then collapse whitespace.
    3. Split on whitespace, commas and hyphens and drop empty tokens.
    4. Keep the first occurrence of each token.
    5. Fold plurals through the vocabulary's plural map.
    """

    if not isinstance(raw, str) or not raw:
        return []
    try:
        folded = _fold_ascii(raw).lower()
        cleaned = _DISALLOWED_RE.sub(" ", folded)
        compact = _WHITESPACE_RE.sub(" ", cleaned).strip()
        tokens = _dedupe(token for token in _SPLIT_RE.split(compact) if token)
        normalized = [vocabulary.plural_map.get(token, token) for token in tokens]
        logger.debug("tokenize raw=%r compact=%r tokens=%s", raw, compact, normalized)
        return normalized
    except Exception:
        logger.exception("tokenize failed for %r", raw)
        return []


def apply_synonyms(tokens: List[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> List[str]:
    """Map each token through the synonym table, identity when absent."""
    try:
        mapped = [vocabulary.synonyms.get(token, token) for token in tokens]
        if mapped != tokens:
            logger.debug("apply_synonyms %s -> %s", tokens, mapped)
        return mapped
    except Exception:
        logger.exception("apply_synonyms failed for %r", tokens)
        return tokens
