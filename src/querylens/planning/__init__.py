"""Query planning: primary table, joins and filter predicates."""

from querylens.planning.catalog import FieldKind, JoinSpec, TableCatalog, TableSpec, default_catalog
from querylens.planning.filters import FilterCompiler
from querylens.planning.planner import QueryPlanner
from querylens.planning.schema import (
    CandidateTable,
    FilterPredicate,
    JoinPath,
    LocationPredicate,
    NumericPredicate,
    PlanResponse,
    QueryPlan,
    QueryResult,
    ResponseStatus,
    SearchTerm,
    StatusPredicate,
    TemporalRangePredicate,
    UserScopePredicate,
)

__all__ = [
    "CandidateTable",
    "FieldKind",
    "FilterCompiler",
    "FilterPredicate",
    "JoinPath",
    "JoinSpec",
    "LocationPredicate",
    "NumericPredicate",
    "PlanResponse",
    "QueryPlan",
    "QueryPlanner",
    "QueryResult",
    "ResponseStatus",
    "SearchTerm",
    "StatusPredicate",
    "TableCatalog",
    "TableSpec",
    "TemporalRangePredicate",
    "UserScopePredicate",
    "default_catalog",
]
