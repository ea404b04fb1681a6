"""Multi-pass entity tagger.

Passes run in a fixed priority order and each one may only tag characters
that earlier passes left unclaimed:

1. temporal phrases (today, last month, ...)
2. first-person pronouns
3. table synonyms
4. business info terms
5. filters: numeric comparisons, then statuses, then locations
6. fallback: leftover meaningful words resolved fuzzily

Within a pass the longest phrase starting at a position wins.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from querylens.dictionary.defaults import default_dictionary
from querylens.dictionary.fuzzy import FuzzyTermResolver
from querylens.dictionary.terms import TermDictionary, normalize_phrase
from querylens.tagging.claims import ClaimMap
from querylens.tagging.comparators import build_comparator_index
from querylens.tagging.lexer import PhraseIndex, Token, parse_number, tokenize
from querylens.tagging.models import EntityMatch, EntityType, NumericValue, UserContext
from querylens.tagging.temporal import resolve_day, resolve_period

logger = logging.getLogger(__name__)

T = TypeVar("T")

CURRENT_USER = "current_user"
MIN_FALLBACK_LENGTH = 3
DEFAULT_SHOW_LOOKBACK = 10


@dataclass
class _TagState:
    text: str
    tokens: list[Token]
    claims: ClaimMap
    context: UserContext
    entities: list[EntityMatch] = field(default_factory=list)

    def span(self, i: int, j: int) -> tuple[int, int]:
        return self.tokens[i].start, self.tokens[j - 1].end

    def add(self, start: int, end: int, **fields: Any) -> EntityMatch:
        self.claims.claim(start, end)
        entity = EntityMatch(text=self.text[start:end], start=start, end=end, **fields)
        self.entities.append(entity)
        return entity


class EntityTagger:
    """Turn a free-text request into non-overlapping typed entities.

    Usage:
        tagger = EntityTagger()
        entities = tagger.tag("laptop stock in paris below 5")
    """

    def __init__(
        self,
        dictionary: TermDictionary | None = None,
        resolver: FuzzyTermResolver | None = None,
        *,
        max_suggestions: int = 5,
        show_lookback: int = DEFAULT_SHOW_LOOKBACK,
    ):
        """Initialize the tagger and build its phrase indexes.

        Args:
            dictionary: Term dictionary (defaults to the built-in one)
            resolver: Fuzzy resolver sharing the same dictionary
            max_suggestions: Cap on suggestions attached to info entities
            show_lookback: Characters before "me" searched for "show"
        """
        self.dictionary = dictionary or default_dictionary()
        self.resolver = resolver or FuzzyTermResolver(self.dictionary)
        self.max_suggestions = max_suggestions
        self.show_lookback = show_lookback

        d = self.dictionary
        self._temporal: PhraseIndex[tuple[int, str | None]] = PhraseIndex()
        for word, offset in d.temporal_days.items():
            self._temporal.add(word, (offset, None))
        for modifier, offset in d.temporal_modifiers.items():
            for unit in d.temporal_units:
                self._temporal.add(f"{modifier} {unit}", (offset, unit))

        self._tables: PhraseIndex[str] = PhraseIndex()
        for table, entry in d.tables.items():
            for phrase in entry.phrases(table):
                self._tables.add(phrase, table)

        self._terms: PhraseIndex[str] = PhraseIndex()
        for key, entry in d.terms.items():
            for phrase in entry.phrases(key):
                self._terms.add(phrase, key)

        self._statuses: PhraseIndex[str] = PhraseIndex()
        for key, status in d.statuses.items():
            for phrase in status.synonyms:
                self._statuses.add(phrase, key)

        self._locations: PhraseIndex[str] = PhraseIndex()
        for canonical, variants in d.locations.items():
            self._locations.add(canonical, canonical)
            for variant in variants:
                self._locations.add(variant, canonical)

        self._comparators = build_comparator_index(d)
        self._pronouns = frozenset(d.pronouns)
        self._prepositions = frozenset(d.location_prepositions)

    def tag(self, text: str, context: UserContext | None = None) -> list[EntityMatch]:
        """Tag a request.

        Args:
            text: Raw request text
            context: Current user and reference time

        Returns:
            Entities sorted by start offset, pairwise non-overlapping
        """
        context = context or UserContext()
        state = _TagState(text, tokenize(text), ClaimMap(len(text)), context)

        self._tag_temporal(state)
        self._tag_pronouns(state)
        self._scan(state, self._tables, self._table_fields)
        self._scan(state, self._terms, self._info_fields)
        self._tag_numeric(state)
        self._scan(state, self._statuses, self._status_fields)
        self._scan(state, self._locations, self._location_fields)
        self._tag_fallback(state)

        entities = sorted(state.entities, key=lambda e: e.start)
        logger.debug(
            "Tagged %d entities (%.0f%% of text claimed): %s",
            len(entities),
            state.claims.claimed_ratio() * 100,
            [f"{e.type.value}:{e.text}" for e in entities],
        )
        return entities

    # =========================================================================
    # Passes
    # =========================================================================

    def _scan(
        self,
        state: _TagState,
        index: PhraseIndex[T],
        build: Callable[[T, str, _TagState], dict[str, Any]],
    ) -> None:
        """Left-to-right longest-free-match scan of one phrase index."""
        i = 0
        while i < len(state.tokens):
            next_i = i + 1
            for j, payload in index.candidates(state.text, state.tokens, i):
                start, end = state.span(i, j)
                if state.claims.is_free(start, end):
                    state.add(start, end, **build(payload, state.text[start:end], state))
                    next_i = j
                    break
            i = next_i

    def _tag_temporal(self, state: _TagState) -> None:
        now = state.context.now

        def build(payload: tuple[int, str | None], text: str, _state: _TagState) -> dict[str, Any]:
            offset, unit = payload
            label = normalize_phrase(text)
            if unit is None:
                value = resolve_day(label, offset, now)
            else:
                value = resolve_period(label, offset, unit, now)
            return {"type": EntityType.TEMPORAL, "resolved_value": value, "confidence": 1.0}

        self._scan(state, self._temporal, build)

    def _tag_pronouns(self, state: _TagState) -> None:
        user = state.context.display_name or CURRENT_USER
        for i, token in enumerate(state.tokens):
            if token.norm not in self._pronouns:
                continue
            # "show me X" is a request verb, not a reference to the user.
            if token.norm == "me" and self._follows_show(state, i):
                continue
            if state.claims.is_free(token.start, token.end):
                state.add(
                    token.start,
                    token.end,
                    type=EntityType.PRONOUN,
                    resolved_value=user,
                    confidence=1.0,
                )

    def _follows_show(self, state: _TagState, i: int) -> bool:
        window_start = state.tokens[i].start - self.show_lookback
        for k in range(i - 1, -1, -1):
            if state.tokens[k].start < window_start:
                break
            if state.tokens[k].norm == "show":
                return True
        return False

    def _table_fields(self, table: str, text: str, state: _TagState) -> dict[str, Any]:
        return {
            "type": EntityType.TABLE,
            "resolved_value": table,
            "table": table,
            "confidence": 0.95,
        }

    def _info_fields(self, key: str, text: str, state: _TagState) -> dict[str, Any]:
        resolution = self.resolver.resolve(key, limit=self.max_suggestions)
        return {
            "type": EntityType.INFO,
            "resolved_value": key,
            "table": self.dictionary.table_of(key),
            "confidence": 0.9 if normalize_phrase(text) == key else 0.85,
            "suggestions": resolution.suggestions,
        }

    def _tag_numeric(self, state: _TagState) -> None:
        tokens = state.tokens
        i = 0
        while i < len(tokens):
            next_i = i + 1
            for j, operator in self._comparators.candidates(state.text, tokens, i):
                number_at = None
                if j < len(tokens) and tokens[j].is_number:
                    number_at = j
                elif j + 1 < len(tokens) and not tokens[j].is_number and tokens[j + 1].is_number:
                    number_at = j + 1
                if number_at is None:
                    continue
                start, end = tokens[i].start, tokens[number_at].end
                if not state.claims.is_free(start, end):
                    continue
                state.add(
                    start,
                    end,
                    type=EntityType.NUMERIC_FILTER,
                    resolved_value=NumericValue(
                        operator=operator, value=parse_number(tokens[number_at])
                    ),
                    confidence=1.0,
                )
                next_i = number_at + 1
                break
            i = next_i

    def _status_fields(self, key: str, text: str, state: _TagState) -> dict[str, Any]:
        status = self.dictionary.statuses[key]
        return {
            "type": EntityType.STATUS_FILTER,
            "resolved_value": key,
            "table": status.table,
            "field_kind": status.field_kind,
            "confidence": 0.9,
        }

    def _location_fields(self, canonical: str, text: str, state: _TagState) -> dict[str, Any]:
        return {
            "type": EntityType.LOCATION_FILTER,
            "resolved_value": canonical,
            "confidence": 0.9,
        }

    def _tag_fallback(self, state: _TagState) -> None:
        for token in state.tokens:
            if token.is_number:
                continue
            word = token.norm
            if len(word) < MIN_FALLBACK_LENGTH or not token.text.isalpha():
                continue
            if (
                self.dictionary.is_stop_word(word)
                or word in self._prepositions
                or word in self._pronouns
            ):
                continue
            if not state.claims.is_free(token.start, token.end):
                continue
            resolution = self.resolver.resolve(word, limit=self.max_suggestions)
            state.add(
                token.start,
                token.end,
                type=EntityType.INFO,
                resolved_value=resolution.canonical or word,
                table=resolution.table,
                confidence=0.6 if resolution.found else 0.4,
                suggestions=resolution.suggestions,
            )
