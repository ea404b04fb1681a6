"""Query plan schema.

A plan says which table to read, which related tables to join, which
structured filter predicates to apply and which free-text search terms to
match. The data store adapter turns a plan into a parameterised query.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from querylens.tagging.models import ComparisonOperator, EntityMatch


def _check_identifier(v: str) -> str:
    if not v or not v.replace("_", "").isalnum():
        raise ValueError(f"Invalid identifier: {v!r}")
    return v


class _Predicate(BaseModel):
    model_config = {"frozen": True}

    table: str = Field(..., description="Table holding the filtered column")
    field: str = Field(..., description="Filtered column")

    @field_validator("table", "field")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        return _check_identifier(v)


class NumericPredicate(_Predicate):
    """``table.field <op> value``."""

    kind: Literal["numeric"] = "numeric"
    op: ComparisonOperator
    value: int | float


class StatusPredicate(_Predicate):
    """Case-insensitive equality on a status or priority column."""

    kind: Literal["status"] = "status"
    value: str


class LocationPredicate(_Predicate):
    """Case-insensitive substring match on a location column."""

    kind: Literal["location"] = "location"
    value: str


class TemporalRangePredicate(_Predicate):
    """Half-open date range ``[start, end)`` on a timestamp column."""

    kind: Literal["temporal_range"] = "temporal_range"
    start: date
    end: date
    single_day: bool = False
    label: str | None = None

    @model_validator(mode="after")
    def validate_range(self) -> "TemporalRangePredicate":
        if self.end <= self.start:
            raise ValueError("Temporal range end must be after start")
        return self


class UserScopePredicate(_Predicate):
    """Restrict rows to the current user."""

    kind: Literal["user_scope"] = "user_scope"
    user_id: str
    display_name: str


FilterPredicate = Annotated[
    Union[
        NumericPredicate,
        StatusPredicate,
        LocationPredicate,
        TemporalRangePredicate,
        UserScopePredicate,
    ],
    Field(discriminator="kind"),
]


class JoinPath(BaseModel):
    """Resolved join between the primary table and a related table."""

    from_: str = Field(..., alias="from", description="Primary table")
    to: str = Field(..., description="Joined table")
    on: tuple[str, str] = Field(..., description="(primary column, joined column)")

    model_config = {"populate_by_name": True}


class SearchTerm(BaseModel):
    """Free-text business term matched against a table's searchable columns."""

    table: str
    value: str
    source_text: str


class QueryPlan(BaseModel):
    """Plan handed to the data store adapter."""

    primary_table: str = Field(..., description="Table the rows come from")
    joins: list[str] = Field(default_factory=list, description="Joined tables, in join order")
    join_paths: list[JoinPath] = Field(default_factory=list)
    predicates: list[FilterPredicate] = Field(default_factory=list)
    search_terms: list[SearchTerm] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)
    row_limit: int = Field(100, ge=1, description="Maximum rows to return")

    @field_validator("primary_table")
    @classmethod
    def validate_primary(cls, v: str) -> str:
        return _check_identifier(v)

    @model_validator(mode="after")
    def validate_joins(self) -> "QueryPlan":
        """Joins are unique and never include the primary table."""
        if len(set(self.joins)) != len(self.joins):
            raise ValueError(f"Duplicate joins: {self.joins}")
        if self.primary_table in self.joins:
            raise ValueError(f"Primary table {self.primary_table} cannot be joined to itself")
        for name in self.joins:
            _check_identifier(name)
        return self

    def tables_in_scope(self) -> list[str]:
        return [self.primary_table, *self.joins]


class CandidateTable(BaseModel):
    """A table that could answer an ambiguous request."""

    table: str
    score: float = Field(..., ge=0.0)


class ResponseStatus(str, Enum):
    OK = "ok"
    NO_ENTITY_FOUND = "no_entity_found"
    AMBIGUOUS_TABLE = "ambiguous_table"


class PlanResponse(BaseModel):
    """Outcome of analysing a request without executing it."""

    status: ResponseStatus
    text: str
    entities: list[EntityMatch] = Field(default_factory=list)
    plan: QueryPlan | None = None
    candidates: list[CandidateTable] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    message: str | None = Field(None, description="Clarification prompt when status is not ok")

    @property
    def ok(self) -> bool:
        return self.status is ResponseStatus.OK


class QueryResult(PlanResponse):
    """Outcome of running a request end to end."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    sql: str | None = None
    row_count: int = 0
    truncated: bool = False
    execution_time_ms: float = 0.0
