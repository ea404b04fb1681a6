"""Fuzzy term resolution over the business dictionary.

Matching is exact-or-partial containment, never edit distance: a key
resolves to every dictionary term it equals (directly or through a
synonym) and to every term whose key contains it or is contained in it.
An exact hit also pulls in the terms related to its canonical key, so a
synonym such as "gaming notebook" still reaches "laptop".

Matches are ranked exact first, then prefix matches, then any other
containment. Suggestions are only offered when they lead back to the
canonical term they were found through.
"""

from pydantic import BaseModel, Field

from querylens.dictionary.terms import TermDictionary, TermEntry, normalize_phrase

# Shorter needles would partially match almost every term.
MIN_PARTIAL_LENGTH = 3

EXACT_SCORE = 1.0
PREFIX_SCORE = 0.9
CONTAINS_SCORE = 0.7


class Resolution(BaseModel):
    """Outcome of resolving one key against the dictionary."""

    key: str = Field(..., description="Normalised input key")
    canonical: str | None = Field(None, description="Best matching canonical term")
    table: str | None = Field(None, description="Table owning the canonical term")
    matches: list[str] = Field(default_factory=list, description="All matching keys, ranked")
    suggestions: list[str] = Field(default_factory=list, description="Deduplicated suggestions")

    @property
    def found(self) -> bool:
        return self.canonical is not None


def _containment_score(needle: str, candidate: str) -> float | None:
    if needle.startswith(candidate) or candidate.startswith(needle):
        return PREFIX_SCORE
    if needle in candidate or candidate in needle:
        return CONTAINS_SCORE
    return None


class FuzzyTermResolver:
    """Resolve free-text keys to canonical dictionary terms.

    Usage:
        resolver = FuzzyTermResolver(default_dictionary())
        resolution = resolver.resolve("laptops")
        resolution.canonical  # "laptop"
    """

    def __init__(self, dictionary: TermDictionary):
        self.dictionary = dictionary
        self._entries: list[tuple[str, TermEntry]] = dictionary.entries()
        self._by_key: dict[str, TermEntry] = {}
        self._exact: dict[str, str] = {}
        for key, entry in self._entries:
            self._by_key.setdefault(key, entry)
            self._exact.setdefault(key, key)
        # Synonyms never shadow another term's own key
        for key, entry in self._entries:
            for phrase in entry.phrases(key):
                self._exact.setdefault(phrase, key)
        self._match_cache: dict[str, list[str]] = {}

    def _match_keys(self, needle: str) -> list[str]:
        """Ranked dictionary keys matching an already normalised needle."""
        cached = self._match_cache.get(needle)
        if cached is not None:
            return cached

        scores: dict[str, float] = {}
        exact = self._exact.get(needle)
        if exact is not None:
            scores[exact] = EXACT_SCORE

        phrases = [needle]
        if exact is not None and exact != needle:
            phrases.append(exact)

        for candidate, _entry in self._entries:
            if candidate in scores or len(candidate) < MIN_PARTIAL_LENGTH:
                continue
            best = None
            for phrase in phrases:
                if len(phrase) < MIN_PARTIAL_LENGTH:
                    continue
                score = _containment_score(phrase, candidate)
                if score is not None and (best is None or score > best):
                    best = score
            if best is not None:
                scores[candidate] = best

        # sorted() is stable, so equal scores keep dictionary order
        ranked = sorted(scores, key=lambda k: -scores[k])
        self._match_cache[needle] = ranked
        return ranked

    def resolve(self, key: str, *, limit: int | None = None, table: str | None = None) -> Resolution:
        """Resolve a key to canonical terms and suggestions.

        Args:
            key: Word or phrase to resolve
            limit: Optional cap on the number of suggestions
            table: Only consider terms owned by this table

        Returns:
            Resolution with ranked matches (exact, then prefix, then other
            containment, dictionary order within a rank) and the union of
            their suggestions, order preserved and duplicates removed.
            A suggestion is kept only if resolving it matches the
            canonical term again.
        """
        needle = normalize_phrase(key)
        if not needle:
            return Resolution(key=needle)

        matches = self._match_keys(needle)
        if table is not None:
            matches = [m for m in matches if self.dictionary.table_of(m) == table]
        canonical = matches[0] if matches else None

        suggestions: list[str] = []
        for match in matches:
            for suggestion in self._by_key[match].suggestions:
                if suggestion in suggestions:
                    continue
                if canonical not in self._match_keys(normalize_phrase(suggestion)):
                    continue
                suggestions.append(suggestion)
        if limit is not None:
            suggestions = suggestions[:limit]

        return Resolution(
            key=needle,
            canonical=canonical,
            table=self.dictionary.table_of(canonical) if canonical else None,
            matches=list(matches),
            suggestions=suggestions,
        )

    def suggest(self, key: str, limit: int = 5, table: str | None = None) -> list[str]:
        """Shortcut returning only the suggestion list for a key."""
        return self.resolve(key, limit=limit, table=table).suggestions
