"""Render a QueryPlan as a parameterised DuckDB SELECT.

Identifiers come from the plan and the catalog and are double-quoted after
validation; every value is bound as a ``?`` parameter.
"""

from datetime import timedelta
from typing import Any

from querylens.planning.catalog import TableCatalog
from querylens.planning.schema import (
    FilterPredicate,
    LocationPredicate,
    NumericPredicate,
    QueryPlan,
    SearchTerm,
    StatusPredicate,
    TemporalRangePredicate,
    UserScopePredicate,
)


def quote_identifier(name: str) -> str:
    """Double-quote a simple identifier.

    Raises:
        ValueError: If the name is not a plain identifier
    """
    if not name or not name.replace("_", "").isalnum():
        raise ValueError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def column_ref(table: str, column: str) -> str:
    return f"{quote_identifier(table)}.{quote_identifier(column)}"


def _like_pattern(value: str) -> str:
    return f"%{value}%"


def predicate_sql(predicate: FilterPredicate) -> tuple[str, list[Any]]:
    """Render one predicate as a WHERE fragment and its parameters."""
    ref = column_ref(predicate.table, predicate.field)

    if isinstance(predicate, NumericPredicate):
        return f"{ref} {predicate.op.value} ?", [predicate.value]

    if isinstance(predicate, StatusPredicate):
        return f"lower(CAST({ref} AS VARCHAR)) = lower(?)", [predicate.value]

    if isinstance(predicate, LocationPredicate):
        return f"CAST({ref} AS VARCHAR) ILIKE ?", [_like_pattern(predicate.value)]

    if isinstance(predicate, TemporalRangePredicate):
        if predicate.single_day and predicate.end - predicate.start == timedelta(days=1):
            return f"CAST({ref} AS DATE) = ?", [predicate.start]
        return f"{ref} >= ? AND {ref} < ?", [predicate.start, predicate.end]

    if isinstance(predicate, UserScopePredicate):
        return f"CAST({ref} AS VARCHAR) = ?", [predicate.user_id]

    raise ValueError(f"Unsupported predicate: {predicate!r}")


def search_sql(term: SearchTerm, catalog: TableCatalog) -> tuple[str, list[Any]] | None:
    """Render a search term as an OR over the table's searchable columns."""
    spec = catalog.table(term.table)
    if spec is None or not spec.searchable:
        return None
    pattern = _like_pattern(term.value)
    clauses = [
        f"CAST({column_ref(term.table, col)} AS VARCHAR) ILIKE ?"
        for col in spec.searchable
    ]
    return "(" + " OR ".join(clauses) + ")", [pattern] * len(clauses)


def build_select(
    plan: QueryPlan, catalog: TableCatalog, *, limit: int | None = None
) -> tuple[str, list[Any]]:
    """Build the SELECT statement for a plan.

    Args:
        plan: Compiled query plan
        catalog: Catalog providing display columns and searchable columns
        limit: LIMIT to apply (defaults to ``plan.row_limit``)

    Returns:
        Tuple of (sql, parameters)
    """
    primary = plan.primary_table
    select = [f"{quote_identifier(primary)}.*"]
    joins = []
    for path in plan.join_paths:
        local, remote = path.on
        joins.append(
            f"LEFT JOIN {quote_identifier(path.to)} ON "
            f"{column_ref(path.to, remote)} = {column_ref(primary, local)}"
        )
        spec = catalog.table(path.to)
        if spec is not None and spec.display:
            select.append(
                f"{column_ref(path.to, spec.display)} AS {quote_identifier(f'{path.to}_{spec.display}')}"
            )

    where: list[str] = []
    params: list[Any] = []
    for predicate in plan.predicates:
        fragment, values = predicate_sql(predicate)
        where.append(fragment)
        params.extend(values)
    for term in plan.search_terms:
        rendered = search_sql(term, catalog)
        if rendered is not None:
            where.append(rendered[0])
            params.extend(rendered[1])

    sql = f"SELECT {', '.join(select)} FROM {quote_identifier(primary)}"
    if joins:
        sql += " " + " ".join(joins)
    if where:
        sql += " WHERE " + " AND ".join(where)
    primary_spec = catalog.table(primary)
    if primary_spec is not None and primary_spec.has_column("id"):
        sql += f" ORDER BY {column_ref(primary, 'id')}"
    sql += f" LIMIT {limit if limit is not None else plan.row_limit}"
    return sql, params
