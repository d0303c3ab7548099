"""Seater-count and dimension extraction from query tokens.

Runs after normalization and before classification. A seater mention is
replaced by the placeholder token ``"seater"`` so the classifier and scorer
still see a meaningful word; size mentions are removed from the stream.
"""
from __future__ import annotations

import logging
import re
from typing import List, NamedTuple

from .models import Numerics

logger = logging.getLogger(__name__)

SEATER_PLACEHOLDER = "seater"

_SEATER_PATTERNS = (
    re.compile(r"(\d+)[-\s]*(?:seater|seat|person)", re.IGNORECASE),
    re.compile(r"(\d+)[-\s]*str", re.IGNORECASE),
)
_SIZE_PATTERN = re.compile(r"(\d+)\s*(inch|ft|feet|cm)", re.IGNORECASE)
_BARE_INT_PATTERN = re.compile(r"^\d+$")

# A lone small number in a furniture query is read as a seat count.
IMPLICIT_SEATER_RANGE = range(1, 11)


class NumericExtraction(NamedTuple):
    tokens: List[str]
    numerics: Numerics


def _match_seater(token: str) -> int | None:
    for pattern in _SEATER_PATTERNS:
        match = pattern.search(token)
        if match:
            return int(match.group(1))
    return None


def extract_numerics(tokens: List[str]) -> NumericExtraction:
    """Pull seater and size values out of ``tokens``.

    Per token, first match wins:

    1. ``3seater`` / ``3-seat`` / ``4person`` / ``3str`` -> seater, placeholder.
    2. ``6ft`` / ``72inch`` / ``180cm`` -> size + unit, token dropped.
    3. A bare integer from 1 to 10 -> implicit seater, placeholder.
    4. Anything else passes through unchanged.
    """

    try:
        numerics = Numerics()
        clean: List[str] = []
        for token in tokens:
            seater = _match_seater(token)
            if seater is not None:
                numerics.seater = seater
                clean.append(SEATER_PLACEHOLDER)
                continue

            size_match = _SIZE_PATTERN.search(token)
            if size_match:
                numerics.size = int(size_match.group(1))
                numerics.sizeUnit = size_match.group(2).lower()
                continue

            if _BARE_INT_PATTERN.match(token):
                value = int(token)
                if value in IMPLICIT_SEATER_RANGE:
                    numerics.seater = value
                    clean.append(SEATER_PLACEHOLDER)
                    continue

            clean.append(token)
        logger.debug("extract_numerics tokens=%s -> %s numerics=%s", tokens, clean, numerics)
        return NumericExtraction(clean, numerics)
    except Exception:
        logger.exception("extract_numerics failed for %r", tokens)
        return NumericExtraction(list(tokens), Numerics())
