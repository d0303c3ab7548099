"""Seater and size extraction."""

from furniture_search.normalizer import tokenize
from furniture_search.numerics import SEATER_PLACEHOLDER, extract_numerics


def test_hyphenated_seater_becomes_placeholder():
    tokens, numerics = extract_numerics(["3-seater", "sofa"])

    assert numerics.seater == 3
    assert tokens == ["seater", "sofa"]


def test_seater_variants():
    """``seat``, ``person`` and the ``str`` abbreviation all count as seats."""

    assert extract_numerics(["4person"]).numerics.seater == 4
    assert extract_numerics(["6seat"]).numerics.seater == 6
    assert extract_numerics(["2str"]).numerics.seater == 2


def test_size_is_removed_from_tokens():
    tokens, numerics = extract_numerics(["6ft", "table"])

    assert tokens == ["table"]
    assert numerics.size == 6
    assert numerics.sizeUnit == "ft"
    assert numerics.seater is None


def test_bare_small_integer_is_implicit_seater():
    tokens, numerics = extract_numerics(["3", "seater", "sofa"])

    assert numerics.seater == 3
    assert tokens == [SEATER_PLACEHOLDER, "seater", "sofa"]


def test_bare_large_integer_passes_through():
    tokens, numerics = extract_numerics(["12", "chair"])

    assert tokens == ["12", "chair"]
    assert numerics.is_empty()


def test_plain_tokens_untouched():
    tokens, numerics = extract_numerics(["oak", "bed"])

    assert tokens == ["oak", "bed"]
    assert numerics.is_empty()


def test_fraction_symbol_does_not_become_seater():
    """``½`` must not surface as the digits ``1`` and ``2`` and set a seater count."""

    tokens, numerics = extract_numerics(tokenize("½ table"))

    assert numerics.seater is None
    assert tokens == ["table"]
