"""Comparator phrases for numeric filters (``below 10``, ``more than 5``)."""

from querylens.dictionary.terms import TermDictionary
from querylens.tagging.lexer import PhraseIndex
from querylens.tagging.models import ComparisonOperator


def build_comparator_index(dictionary: TermDictionary) -> PhraseIndex[ComparisonOperator]:
    """Index every less-than and greater-than phrase of a dictionary."""
    index: PhraseIndex[ComparisonOperator] = PhraseIndex()
    for phrase in dictionary.less_than:
        index.add(phrase, ComparisonOperator.LT)
    for phrase in dictionary.greater_than:
        index.add(phrase, ComparisonOperator.GT)
    return index
