"""Business term dictionary and fuzzy term resolution."""

from querylens.dictionary.defaults import default_dictionary
from querylens.dictionary.fuzzy import FuzzyTermResolver, Resolution
from querylens.dictionary.loader import dump_dictionary, load_dictionary
from querylens.dictionary.terms import StatusTerm, TermDictionary, TermEntry, normalize_phrase

__all__ = [
    "FuzzyTermResolver",
    "Resolution",
    "StatusTerm",
    "TermDictionary",
    "TermEntry",
    "default_dictionary",
    "dump_dictionary",
    "load_dictionary",
    "normalize_phrase",
]
