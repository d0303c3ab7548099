"""Static vocabularies that drive query understanding.

Everything the ranking pipeline knows about the furniture domain lives here:
plural folding, synonyms, stop words, the product-type hierarchy and the
color/material lists used by the modifier predicate. The tables are bundled in
an immutable :class:`Vocabulary` that is passed into each stage, so a test (or
another storefront) can swap in its own tables without touching the algorithm.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class TypeProfile:
    """Taxonomy entry for one product type."""

    primary: Tuple[str, ...]
    secondary: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    attributes: Tuple[str, ...] = ()
    boost: float = 1.0
    avoid: Tuple[str, ...] = ()


PLURAL_MAP: Mapping[str, str] = MappingProxyType(
    {
        "beds": "bed",
        "sofas": "sofa",
        "chairs": "chair",
        "tables": "table",
        "cabinets": "cabinet",
        "wardrobes": "wardrobe",
        "cupboards": "cupboard",
        "almirahs": "almirah",
        "couches": "couch",
        "sectionals": "sectional",
        "settees": "settee",
        "loveseats": "loveseat",
        "recliners": "recliner",
        "stools": "stool",
        "benches": "bench",
        "armchairs": "armchair",
        "desks": "desk",
        "consoles": "console",
        "mattresses": "mattress",
        "headboards": "headboard",
        "cots": "cot",
        "shelves": "shelf",
        "dressers": "dresser",
        "almaris": "almari",
        "closets": "closet",
    }
)

# Colloquial spellings and aliases folded onto catalog vocabulary.
SYNONYMS: Mapping[str, str] = MappingProxyType(
    {
        "couch": "sofa",
        "settee": "sofa",
        "soffa": "sofa",
        "sofaa": "sofa",
        "chiar": "chair",
        "tebal": "table",
        "tabel": "table",
        "bead": "bed",
        "almira": "almirah",
        "cuboard": "cupboard",
        "wadrobe": "wardrobe",
        "wardrob": "wardrobe",
        "matress": "mattress",
        "dinning": "dining",
        "centre": "center",
        "diwan": "divan",
        "lounger": "recliner",
        "wooden": "wood",
        "timber": "wood",
        "colour": "color",
        "steal": "steel",
        "leatherette": "leather",
    }
)

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "the",
        "and",
        "or",
        "for",
        "with",
        "in",
        "on",
        "of",
        "to",
        "by",
        "at",
        "from",
        "my",
        "me",
        "i",
        "want",
        "need",
        "show",
        "find",
        "buy",
        "best",
        "new",
        "good",
        "online",
        "price",
        "set",
        "piece",
        "pcs",
    }
)

# Material and color families. The group name prefix decides whether members
# count as descriptive modifiers.
SYNONYM_GROUPS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "material_wood": (
            "wood",
            "teak",
            "oak",
            "sheesham",
            "walnut",
            "mango",
            "pine",
            "acacia",
            "plywood",
            "mdf",
            "engineered",
        ),
        "material_metal": ("metal", "steel", "iron", "aluminium", "aluminum", "brass", "chrome"),
        "material_fabric": ("fabric", "velvet", "linen", "cotton", "suede", "chenille", "upholstered"),
        "material_leather": ("leather", "faux"),
        "material_stone": ("marble", "granite", "stone", "glass"),
        "color_neutral": ("white", "black", "grey", "gray", "beige", "cream", "ivory", "charcoal"),
        "color_warm": ("red", "maroon", "orange", "yellow", "mustard", "brown", "tan"),
        "color_cool": ("blue", "navy", "teal", "green", "olive"),
        "room": ("living", "bedroom", "dining", "office", "kitchen", "study", "outdoor"),
        "style": ("modern", "classic", "vintage", "rustic", "contemporary", "minimalist"),
    }
)

MODIFIER_GROUP_PREFIXES: Tuple[str, ...] = ("material_", "color_")

COLORS: Tuple[str, ...] = ("black", "white", "brown", "gray", "grey", "blue", "red", "green", "yellow")

MATERIALS: Tuple[str, ...] = ("wood", "metal", "fabric", "leather", "plastic", "glass")

# Table order matters: intent resolution scans types in this order.
PRODUCT_HIERARCHY: Mapping[str, TypeProfile] = MappingProxyType(
    {
        "sofa": TypeProfile(
            primary=("sofa", "sectional", "couch", "settee", "sofas", "couches", "sectionals", "settees"),
            secondary=("loveseat", "recliner", "loveseats", "recliners"),
            categories=("living room", "seating"),
            attributes=("seater", "material", "color"),
            boost=2.0,
            avoid=("chair", "table", "bed", "cabinet"),
        ),
        "chair": TypeProfile(
            primary=("chair", "chairs"),
            secondary=("stool", "bench", "armchair", "stools", "benches", "armchairs"),
            categories=("seating", "office", "dining"),
            attributes=("material", "color", "style"),
            boost=2.0,
            avoid=("sofa", "table", "bed", "wardrobe"),
        ),
        "table": TypeProfile(
            primary=("table", "tables"),
            secondary=("desk", "console", "desks", "consoles"),
            categories=("dining", "office", "living room"),
            attributes=("material", "size", "style"),
            boost=2.0,
            avoid=("chair", "sofa", "bed", "wardrobe"),
        ),
        "bed": TypeProfile(
            primary=("bed", "beds"),
            secondary=("mattress", "headboard", "cot", "mattresses", "headboards", "cots"),
            categories=("bedroom", "sleeping"),
            attributes=("size", "material", "style"),
            boost=2.0,
            avoid=("chair", "sofa", "table", "cabinet"),
        ),
        "cabinet": TypeProfile(
            primary=("cabinet", "wardrobe", "cupboard", "cabinets", "wardrobes", "cupboards"),
            secondary=("shelf", "storage", "dresser", "shelves", "dressers"),
            categories=("storage", "bedroom", "kitchen"),
            attributes=("material", "size", "doors"),
            boost=2.0,
            avoid=("chair", "sofa", "table", "bed"),
        ),
        "almirah": TypeProfile(
            primary=(
                "almirah",
                "wardrobe",
                "cupboard",
                "cabinet",
                "almirahs",
                "wardrobes",
                "cupboards",
                "cabinets",
            ),
            secondary=("almari", "storage", "closet", "almaris", "closets"),
            categories=("storage", "bedroom"),
            attributes=("material", "doors", "size"),
            boost=2.0,
            avoid=("chair", "sofa", "table", "bed"),
        ),
    }
)

PRIMARY_PRODUCT_TYPES: frozenset[str] = frozenset(PRODUCT_HIERARCHY)

SEATABLE_TYPES: frozenset[str] = frozenset({"sofa", "chair", "table"})


@dataclass(frozen=True)
class Vocabulary:
    """Immutable bundle of every lookup table used by the pipeline."""

    plural_map: Mapping[str, str] = field(default_factory=lambda: PLURAL_MAP)
    synonyms: Mapping[str, str] = field(default_factory=lambda: SYNONYMS)
    stop_words: frozenset[str] = field(default=STOP_WORDS)
    primary_types: frozenset[str] = field(default=PRIMARY_PRODUCT_TYPES)
    synonym_groups: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: SYNONYM_GROUPS)
    modifier_group_prefixes: Tuple[str, ...] = MODIFIER_GROUP_PREFIXES
    colors: Tuple[str, ...] = COLORS
    materials: Tuple[str, ...] = MATERIALS
    hierarchy: Mapping[str, TypeProfile] = field(default_factory=lambda: PRODUCT_HIERARCHY)
    seatable_types: frozenset[str] = field(default=SEATABLE_TYPES)

    def synonym_group(self, token: str) -> Optional[str]:
        """Return the name of the first group that lists ``token``."""
        for group, members in self.synonym_groups.items():
            if token in members:
                return group
        return None

    def profile(self, product_type: Optional[str]) -> Optional[TypeProfile]:
        if not product_type:
            return None
        return self.hierarchy.get(product_type)


DEFAULT_VOCABULARY = Vocabulary()
