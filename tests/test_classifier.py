"""Token classification buckets."""

from furniture_search.classifier import classify_tokens, is_modifier


def test_classify_partitions_tokens():
    tokens = ["the", "sofa", "grey", "teak", "large", "cushion"]
    classified = classify_tokens(tokens)

    assert classified.stopWords == ["the"]
    assert classified.primary == ["sofa"]
    assert classified.modifiers == ["grey", "teak", "large"]
    assert classified.regular == ["cushion"]
    assert len(classified.primary) + len(classified.modifiers) + len(classified.stopWords) + len(classified.regular) == len(tokens)


def test_stop_word_wins_over_other_buckets():
    """``set`` is a stop word even though it often appears in product names."""

    assert classify_tokens(["set"]).stopWords == ["set"]


def test_modifier_predicate():
    assert is_modifier("velvet")  # material group
    assert is_modifier("navy")  # color group
    assert is_modifier("plastic")  # literal material list
    assert is_modifier("3seater")
    assert is_modifier("xl")
    assert not is_modifier("living")  # room group is not a modifier family
    assert not is_modifier("seater")


def test_secondary_terms_are_regular_tokens():
    classified = classify_tokens(["wardrobe", "recliner"])

    assert classified.primary == []
    assert classified.regular == ["wardrobe", "recliner"]
