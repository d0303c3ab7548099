"""Token classification into primary / modifier / stop-word / regular buckets."""
from __future__ import annotations

import logging
import re
from typing import List

from .models import ClassifiedTokens
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

_SEATER_MODIFIER_RE = re.compile(r"^\d+(seater|seat)$")
_SIZE_CLASS_RE = re.compile(r"^(small|medium|large|xl|xxl)$")


def is_modifier(token: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    """True for color, material and size-class tokens.

    The predicate is a union: a material/color synonym group, the literal color
    list, the literal material list, then the seater and size-class patterns.
    """

    group = vocabulary.synonym_group(token)
    if group and group.startswith(vocabulary.modifier_group_prefixes):
        return True
    if token in vocabulary.colors:
        return True
    if token in vocabulary.materials:
        return True
    return bool(_SEATER_MODIFIER_RE.match(token) or _SIZE_CLASS_RE.match(token))


def classify_tokens(tokens: List[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> ClassifiedTokens:
    try:
        classified = ClassifiedTokens()
        for token in tokens:
            if token in vocabulary.stop_words:
                classified.stopWords.append(token)
            elif token in vocabulary.primary_types:
                classified.primary.append(token)
            elif is_modifier(token, vocabulary):
                classified.modifiers.append(token)
            else:
                classified.regular.append(token)
        logger.debug("classify_tokens %s -> %s", tokens, classified.model_dump())
        return classified
    except Exception:
        # Over-inclusive on failure: nothing is silently dropped.
        logger.exception("classify_tokens failed for %r", tokens)
        return ClassifiedTokens(primary=list(tokens))
