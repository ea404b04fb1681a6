"""Tests for FuzzyTermResolver."""

import pytest

from querylens.dictionary.defaults import default_dictionary
from querylens.dictionary.fuzzy import FuzzyTermResolver
from querylens.dictionary.terms import TermDictionary


@pytest.fixture()
def resolver() -> FuzzyTermResolver:
    return FuzzyTermResolver(default_dictionary())


def test_exact_key(resolver):
    resolution = resolver.resolve("laptop")
    assert resolution.found
    assert resolution.canonical == "laptop"
    assert resolution.table == "products"
    assert resolution.matches == ["laptop", "gaming laptop", "business laptop"]


def test_synonym_resolves_to_canonical(resolver):
    resolution = resolver.resolve("Laptops")
    assert resolution.key == "laptops"
    assert resolution.canonical == "laptop"
    # related terms of the canonical key come along
    assert resolution.matches == ["laptop", "gaming laptop", "business laptop"]


def test_alias_of_person(resolver):
    resolution = resolver.resolve("ahmed")
    assert resolution.canonical == "ahmed hassan"
    assert resolution.table == "customers"


def test_table_synonym(resolver):
    resolution = resolver.resolve("inventory")
    assert resolution.canonical == "stock"
    assert resolution.table == "stock"


def test_partial_containment_both_ways(resolver):
    # needle contains a key
    assert resolver.resolve("laptopz").canonical == "laptop"
    # key contains the needle
    assert resolver.resolve("headphone").canonical == "headphones"


def test_short_keys_do_not_match_partially(resolver):
    resolution = resolver.resolve("ca")
    assert not resolution.found
    assert resolution.matches == []
    assert resolution.suggestions == []


def test_empty_key(resolver):
    resolution = resolver.resolve("   ")
    assert resolution.key == ""
    assert not resolution.found


def test_unknown_key(resolver):
    resolution = resolver.resolve("zebra")
    assert resolution.canonical is None
    assert resolution.table is None


def test_suggestions_are_deduplicated_and_ordered(resolver):
    suggestions = resolver.resolve("laptop").suggestions
    assert suggestions[:3] == ["laptop", "gaming laptop", "business laptop"]
    assert len(suggestions) == len(set(suggestions))


def test_limit_caps_suggestions(resolver):
    assert len(resolver.resolve("laptop", limit=2).suggestions) == 2
    assert resolver.suggest("mouse", limit=3) == ["mouse", "wireless mouse", "computer mouse"]


def test_synonym_reaches_related_terms(resolver):
    resolution = resolver.resolve("gaming notebook")
    assert resolution.canonical == "gaming laptop"
    assert "laptop" in resolution.matches


# ---------------------------------------------------------------------------
# Suggestions lead back to where they came from
# ---------------------------------------------------------------------------


def test_every_entry_suggestion_resolves():
    """Suggestions stored on an entry must lead back to it."""
    dictionary = default_dictionary()
    resolver = FuzzyTermResolver(dictionary)
    unresolved = [
        (key, suggestion)
        for key, entry in dictionary.entries()
        for suggestion in entry.suggestions
        if key not in resolver.resolve(suggestion).matches
    ]
    assert unresolved == []


def test_every_offered_suggestion_resolves():
    """Suggestions offered to users must lead back to the key when tried."""
    dictionary = default_dictionary()
    resolver = FuzzyTermResolver(dictionary)
    unresolved = [
        (key, suggestion)
        for key, _entry in dictionary.entries()
        for suggestion in resolver.resolve(key).suggestions
        if key not in resolver.resolve(suggestion).matches
    ]
    assert unresolved == []


def test_sibling_suggestions_are_dropped(resolver):
    # "business laptop" only reaches "laptop", never "gaming laptop"
    suggestions = resolver.resolve("gaming laptop").suggestions
    assert "business laptop" not in suggestions
    assert suggestions[:3] == ["gaming laptop", "gaming notebook", "laptop"]


# ---------------------------------------------------------------------------
# Ranking and table filter
# ---------------------------------------------------------------------------


@pytest.fixture()
def charger_resolver() -> FuzzyTermResolver:
    dictionary = TermDictionary(
        tables={"products": {}, "customers": {}},
        terms={
            "wireless charger": {
                "table": "products",
                "suggestions": ["wireless charger", "charger"],
            },
            "charger": {"table": "products", "suggestions": ["charger"]},
            "charger world": {"table": "customers", "suggestions": ["charger world"]},
        },
    )
    return FuzzyTermResolver(dictionary)


def test_prefix_matches_rank_before_containment(charger_resolver):
    resolution = charger_resolver.resolve("charg")
    assert resolution.matches == ["charger", "charger world", "wireless charger"]
    assert resolution.canonical == "charger"
    assert resolution.suggestions == ["charger", "charger world", "wireless charger"]


def test_table_filter(charger_resolver):
    resolution = charger_resolver.resolve("charg", table="customers")
    assert resolution.matches == ["charger world"]
    assert resolution.canonical == "charger world"
    assert resolution.table == "customers"
    assert resolution.suggestions == ["charger world"]
    assert charger_resolver.suggest("charg", table="products") == ["charger", "wireless charger"]


def test_table_filter_excludes_other_tables(resolver):
    resolution = resolver.resolve("laptop", table="customers")
    assert not resolution.found
    assert resolution.suggestions == []
    assert resolver.resolve("laptop", table="products").canonical == "laptop"
