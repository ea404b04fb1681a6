"""Entity models produced by the tagger.

Every entity carries character offsets into the original request text
(``text[start:end] == entity.text``) and a typed resolved value.
"""

from datetime import date, datetime
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field, model_validator


class EntityType(str, Enum):
    """Kind of span recognised in a request."""

    TABLE = "table"
    PRONOUN = "pronoun"
    TEMPORAL = "temporal"
    NUMERIC_FILTER = "numeric_filter"
    STATUS_FILTER = "status_filter"
    LOCATION_FILTER = "location_filter"
    INFO = "info"


class ComparisonOperator(str, Enum):
    LT = "<"
    GT = ">"


class NumericValue(BaseModel):
    """Resolved value of a numeric filter such as ``below 10``."""

    model_config = {"frozen": True}

    operator: ComparisonOperator
    value: int | float


class TemporalValue(BaseModel):
    """Resolved half-open date range ``[start, end)``."""

    model_config = {"frozen": True}

    label: str = Field(..., description="Normalised phrase, e.g. 'last month'")
    start: date
    end: date
    single_day: bool = Field(False, description="True for today/yesterday/tomorrow")

    @model_validator(mode="after")
    def validate_range(self) -> "TemporalValue":
        if self.end <= self.start:
            raise ValueError(f"Temporal range end {self.end} must be after start {self.start}")
        return self


ResolvedValue = Union[NumericValue, TemporalValue, str]


class EntityMatch(BaseModel):
    """A typed span of the request text.

    Attributes:
        text: Exact substring of the request
        start: Start offset (inclusive)
        end: End offset (exclusive)
        type: Entity kind
        resolved_value: Canonical value (table name, status, city, user,
            NumericValue or TemporalValue)
        table: Table hint, if the entity belongs to one
        confidence: Tagger confidence in [0, 1]
        suggestions: Fuzzy suggestions for unclear info terms
        field_kind: ``status`` or ``priority`` for status filters
    """

    model_config = {"frozen": True}

    text: str
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=1)
    type: EntityType
    resolved_value: ResolvedValue
    table: str | None = None
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    suggestions: list[str] = Field(default_factory=list)
    field_kind: str | None = None

    @model_validator(mode="after")
    def validate_span(self) -> "EntityMatch":
        if self.end <= self.start:
            raise ValueError(f"Entity span [{self.start}, {self.end}) is empty")
        if len(self.text) != self.end - self.start:
            raise ValueError("Entity text length must match its span")
        return self

    def overlaps(self, other: "EntityMatch") -> bool:
        return self.start < other.end and other.start < self.end


class UserContext(BaseModel):
    """Who is asking, and when.

    ``now`` is injected so that temporal resolution is deterministic.
    """

    display_name: str | None = Field(None, description="Current user's full name")
    now: datetime = Field(default_factory=datetime.now)
