"""Tests for YAML dictionaries and dictionary validation."""

import pytest

from querylens.dictionary.defaults import default_dictionary
from querylens.dictionary.loader import dump_dictionary, load_dictionary
from querylens.dictionary.terms import TermDictionary, normalize_phrase
from querylens.errors import DictionaryError
from querylens.tagging.models import EntityType
from querylens.tagging.tagger import EntityTagger

CUSTOM_YAML = """
tables:
  orders:
    synonyms: [order, orders, purchase]
terms:
  "  Big   Widget ":
    table: orders
    synonyms: [jumbo widget]
    suggestions: [big widget]
locations:
  lisbon: []
stop_words: [the]
"""


def test_normalize_phrase():
    assert normalize_phrase("  New   YORK ") == "new york"
    assert normalize_phrase("") == ""


def test_round_trip(tmp_path):
    original = default_dictionary()
    path = dump_dictionary(original, tmp_path / "nested" / "dictionary.yaml")
    assert path.exists()
    assert load_dictionary(path).model_dump() == original.model_dump()


def test_custom_dictionary_drives_the_tagger(tmp_path):
    path = tmp_path / "dictionary.yaml"
    path.write_text(CUSTOM_YAML, encoding="utf-8")
    dictionary = load_dictionary(path)
    assert list(dictionary.terms) == ["big widget"]

    entities = EntityTagger(dictionary).tag("jumbo widget purchase in lisbon")
    assert [(e.type, e.resolved_value) for e in entities] == [
        (EntityType.INFO, "big widget"),
        (EntityType.TABLE, "orders"),
        (EntityType.LOCATION_FILTER, "lisbon"),
    ]


def test_missing_file(tmp_path):
    with pytest.raises(DictionaryError, match="not found"):
        load_dictionary(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("tables: [unclosed\n", encoding="utf-8")
    with pytest.raises(DictionaryError, match="Invalid YAML"):
        load_dictionary(path)


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- orders\n- products\n", encoding="utf-8")
    with pytest.raises(DictionaryError, match="mapping"):
        load_dictionary(path)


def test_unknown_table_reference(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "tables:\n  orders: {}\nterms:\n  widget:\n    table: invoices\n", encoding="utf-8"
    )
    with pytest.raises(DictionaryError, match="unknown table 'invoices'") as exc_info:
        load_dictionary(path)
    assert exc_info.value.diagnostic.startswith("dictionary_error: ")


def test_location_may_not_start_with_preposition():
    with pytest.raises(ValueError, match="preposition"):
        TermDictionary(
            tables={"orders": {}},
            locations={"in town": []},
            location_prepositions=["in"],
        )


def test_tables_required():
    with pytest.raises(ValueError):
        TermDictionary(tables={})


def test_stop_words_lookup():
    dictionary = default_dictionary()
    assert dictionary.is_stop_word("the")
    assert not dictionary.is_stop_word("laptop")
    assert dictionary.table_of("laptop") == "products"
    assert dictionary.table_of("sales") == "sales"
    assert dictionary.table_of("work from home") is None
