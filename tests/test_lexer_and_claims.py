"""Tests for the tokenizer, phrase index and claim map."""

import pytest

from querylens.tagging.claims import ClaimMap
from querylens.tagging.lexer import PhraseIndex, TokenKind, parse_number, phrase_norms, tokenize


def test_tokens_keep_original_offsets():
    """Offsets index the original text, not a lowercased copy."""
    text = "Show ME the Stock"
    tokens = tokenize(text)
    assert [t.text for t in tokens] == ["Show", "ME", "the", "Stock"]
    for token in tokens:
        assert text[token.start:token.end] == token.text
    assert tokens[1].norm == "me"


def test_numbers_and_words_are_distinguished():
    tokens = tokenize("below 10 or 2.5 but not 5th")
    kinds = {t.text: t.kind for t in tokens}
    assert kinds["10"] is TokenKind.NUMBER
    assert kinds["2.5"] is TokenKind.NUMBER
    assert kinds["5th"] is TokenKind.WORD
    assert parse_number(tokens[1]) == 10
    assert isinstance(parse_number(tokens[3]), float)


def test_hyphenated_and_underscored_words_stay_whole():
    assert [t.text for t in tokenize("usb-c hub in_progress")] == ["usb-c", "hub", "in_progress"]


def test_phrase_norms():
    assert phrase_norms("New  York") == ("new", "york")


def test_phrase_index_yields_longest_first():
    index: PhraseIndex[str] = PhraseIndex()
    index.add("laptop", "short")
    index.add("laptop stand", "long")
    text = "laptop stand"
    tokens = tokenize(text)
    candidates = list(index.candidates(text, tokens, 0))
    assert candidates == [(2, "long"), (1, "short")]


def test_phrase_index_requires_whitespace_between_tokens():
    index: PhraseIndex[str] = PhraseIndex()
    index.add("ahmed hassan", "customer")
    text = "ahmed, hassan"
    assert list(index.candidates(text, tokenize(text), 0)) == []


def test_phrase_index_first_payload_wins_for_duplicates():
    index: PhraseIndex[str] = PhraseIndex()
    index.add("stock", "first")
    index.add("STOCK", "second")
    assert len(index) == 1
    assert list(index.candidates("stock", tokenize("stock"), 0)) == [(1, "first")]


def test_claim_map_rejects_overlaps():
    claims = ClaimMap(20)
    assert claims.is_free(0, 5)
    claims.claim(0, 5)
    assert not claims.is_free(4, 8)
    assert claims.is_free(5, 8)
    with pytest.raises(ValueError):
        claims.claim(3, 6)


def test_claim_map_rejects_invalid_spans():
    claims = ClaimMap(5)
    assert not claims.is_free(3, 3)
    assert not claims.is_free(2, 9)
