"""Product-type intent resolution with assigned confidence levels."""
from __future__ import annotations

import logging

from .models import ClassifiedTokens, Intent, Numerics
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

LITERAL_CONFIDENCE = 1.0
PRIMARY_TERM_CONFIDENCE = 0.8
SECONDARY_TERM_CONFIDENCE = 0.6
SEATER_BOOST = 0.2


def determine_intent(
    classified: ClassifiedTokens,
    numerics: Numerics,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> Intent:
    """Guess which product type the query targets.

    A literal product-type token wins outright. Otherwise modifiers then regular
    tokens are scanned against the hierarchy: a primary-term hit is accepted and
    ends the scan, a secondary-term hit is kept tentatively and may be replaced
    by a later hit. A seater count on a seatable type adds a small boost.
    """

    try:
        primary_type = None
        confidence = 0.0

        if classified.primary:
            primary_type = classified.primary[0]
            confidence = LITERAL_CONFIDENCE
        else:
            for token in [*classified.modifiers, *classified.regular]:
                for type_name, profile in vocabulary.hierarchy.items():
                    if token in profile.primary:
                        primary_type = type_name
                        confidence = PRIMARY_TERM_CONFIDENCE
                        break
                    if token in profile.secondary:
                        primary_type = type_name
                        confidence = SECONDARY_TERM_CONFIDENCE
                if confidence >= PRIMARY_TERM_CONFIDENCE:
                    break

        if numerics.seater and primary_type in vocabulary.seatable_types:
            confidence = min(LITERAL_CONFIDENCE, confidence + SEATER_BOOST)

        intent = Intent(primaryType=primary_type, confidence=round(confidence, 2))
        logger.debug("determine_intent classified=%s numerics=%s -> %s", classified.model_dump(), numerics, intent)
        return intent
    except Exception:
        logger.exception("determine_intent failed")
        return Intent()
