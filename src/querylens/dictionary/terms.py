"""Pydantic models for the business term dictionary.

The dictionary is a static, language-agnostic data set: table synonyms,
business information terms, status and priority keywords, known locations,
comparator phrases, temporal keywords and stop words. It is built once at
startup and treated as read-only afterwards.
"""

from typing import Literal

from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator


def normalize_phrase(text: str) -> str:
    """Lowercase a phrase and collapse internal whitespace."""
    return " ".join(text.casefold().split())


def _normalize_keys(value: dict) -> dict:
    if not isinstance(value, dict):
        return value
    return {normalize_phrase(str(key)): item for key, item in value.items()}


class TermEntry(BaseModel):
    """A canonical dictionary term.

    Attributes:
        table: Table the term belongs to, if any
        synonyms: Alternative phrasings that resolve to this term
        suggestions: Related terms offered when the request is unclear
    """

    model_config = {"frozen": True}

    table: str | None = Field(None, description="Owning table, if any")
    synonyms: list[str] = Field(default_factory=list, description="Alternative phrasings")
    suggestions: list[str] = Field(default_factory=list, description="Related terms")

    @field_validator("synonyms", "suggestions")
    @classmethod
    def normalize_phrases(cls, v: list[str]) -> list[str]:
        cleaned = []
        for phrase in v:
            norm = normalize_phrase(phrase)
            if norm and norm not in cleaned:
                cleaned.append(norm)
        return cleaned

    def phrases(self, key: str) -> list[str]:
        """Return the canonical key followed by every synonym."""
        return [key] + [s for s in self.synonyms if s != key]


class StatusTerm(BaseModel):
    """A workflow status or priority keyword.

    Only the listed synonyms are matched in text; the key is the value
    written into the filter predicate.
    """

    model_config = {"frozen": True}

    field_kind: Literal["status", "priority"] = Field("status", description="Column family")
    table: str | None = Field(None, description="Table this status most often refers to")
    synonyms: list[str] = Field(default_factory=list)

    @field_validator("synonyms")
    @classmethod
    def normalize_synonyms(cls, v: list[str]) -> list[str]:
        return [normalize_phrase(s) for s in v if normalize_phrase(s)]


class TermDictionary(BaseModel):
    """Complete vocabulary used by the entity tagger and fuzzy resolver."""

    model_config = {"frozen": True}

    tables: dict[str, TermEntry] = Field(..., min_length=1, description="Table name -> synonyms")
    terms: dict[str, TermEntry] = Field(default_factory=dict, description="Business info terms")
    statuses: dict[str, StatusTerm] = Field(default_factory=dict)
    locations: dict[str, list[str]] = Field(default_factory=dict, description="Canonical -> variants")
    pronouns: list[str] = Field(default_factory=lambda: ["my", "me", "mine", "myself", "i"])
    temporal_days: dict[str, int] = Field(
        default_factory=lambda: {"today": 0, "yesterday": -1, "tomorrow": 1},
        description="Day keyword -> offset in days",
    )
    temporal_modifiers: dict[str, int] = Field(
        default_factory=lambda: {"this": 0, "current": 0, "last": -1, "previous": -1, "next": 1},
        description="Modifier -> period offset",
    )
    temporal_units: list[Literal["week", "month", "year"]] = Field(
        default_factory=lambda: ["week", "month", "year"]
    )
    less_than: list[str] = Field(default_factory=list)
    greater_than: list[str] = Field(default_factory=list)
    location_prepositions: list[str] = Field(default_factory=list)
    stop_words: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list, description="Example requests")

    _stop_words: frozenset[str] = PrivateAttr(default=frozenset())

    @field_validator("tables", "terms", "statuses", "locations", mode="before")
    @classmethod
    def normalize_keys(cls, v):
        return _normalize_keys(v)

    @field_validator(
        "pronouns", "less_than", "greater_than", "location_prepositions", "stop_words"
    )
    @classmethod
    def normalize_word_lists(cls, v: list[str]) -> list[str]:
        return [normalize_phrase(w) for w in v if normalize_phrase(w)]

    @model_validator(mode="after")
    def validate_consistency(self) -> "TermDictionary":
        """Check cross-references between sections."""
        for key, entry in self.terms.items():
            if entry.table is not None and entry.table not in self.tables:
                raise ValueError(f"Term '{key}' refers to unknown table '{entry.table}'")
        for key, status in self.statuses.items():
            if status.table is not None and status.table not in self.tables:
                raise ValueError(f"Status '{key}' refers to unknown table '{status.table}'")

        prepositions = set(self.location_prepositions)
        for canonical, variants in self.locations.items():
            for phrase in [canonical, *variants]:
                first = normalize_phrase(phrase).split(" ")[0]
                if first in prepositions:
                    raise ValueError(
                        f"Location phrase '{phrase}' must not start with a preposition"
                    )
        return self

    def model_post_init(self, context) -> None:
        self._stop_words = frozenset(self.stop_words)

    def is_stop_word(self, word: str) -> bool:
        return word in self._stop_words

    def table_of(self, key: str) -> str | None:
        """Return the owning table of a term or table key, if known."""
        entry = self.terms.get(key)
        if entry is not None:
            return entry.table
        if key in self.tables:
            return key
        return None

    def entries(self) -> list[tuple[str, TermEntry]]:
        """Info terms followed by table entries, in dictionary order."""
        return list(self.terms.items()) + list(self.tables.items())
