"""Primary table selection and join inference.

The planner produces a plan skeleton: primary table, ordered joins with
their join columns, and info terms routed to searchable columns. Filter
predicates are added afterwards by the filter compiler.
"""

import logging

from querylens.errors import (
    AmbiguousTable,
    ErrorCode,
    NoEntityFound,
    format_diagnostic,
)
from querylens.planning.ambiguity import collect_suggestions, rank_candidate_tables
from querylens.planning.catalog import FieldKind, TableCatalog, default_catalog
from querylens.planning.schema import JoinPath, QueryPlan, SearchTerm
from querylens.tagging.models import EntityMatch, EntityType

logger = logging.getLogger(__name__)

PRODUCT_TABLE = "products"
CUSTOMER_TABLE = "customers"
USER_TABLE = "users"


def required_field_kind(entity: EntityMatch) -> FieldKind | None:
    """Column family a filter entity needs, or None for non-filters."""
    if entity.type is EntityType.PRONOUN:
        return FieldKind.USER
    if entity.type is EntityType.TEMPORAL:
        return FieldKind.TIMESTAMP
    if entity.type is EntityType.NUMERIC_FILTER:
        return FieldKind.NUMERIC
    if entity.type is EntityType.LOCATION_FILTER:
        return FieldKind.LOCATION
    if entity.type is EntityType.STATUS_FILTER:
        return FieldKind.PRIORITY if entity.field_kind == "priority" else FieldKind.STATUS
    return None


class QueryPlanner:
    """Choose the primary table and the joins for a set of entities."""

    def __init__(
        self,
        catalog: TableCatalog | None = None,
        *,
        row_limit: int = 100,
        max_suggestions: int = 5,
    ):
        self.catalog = catalog or default_catalog()
        self.row_limit = row_limit
        self.max_suggestions = max_suggestions

    def plan(
        self,
        entities: list[EntityMatch],
        text: str = "",
        *,
        preferred_table: str | None = None,
    ) -> QueryPlan:
        """Build a plan skeleton.

        Args:
            entities: Tagged entities, sorted by offset
            text: Original request, used in error messages
            preferred_table: Primary table chosen by the user after an
                ambiguity question; skips primary-table selection

        Returns:
            QueryPlan with primary table, joins, join paths, search terms
            and diagnostics; predicates are left empty

        Raises:
            NoEntityFound: If there are no entities
            AmbiguousTable: If info-only entities fit several tables
            ValueError: If preferred_table is not in the catalog
        """
        if not entities:
            raise NoEntityFound(text)

        if preferred_table is not None:
            if self.catalog.table(preferred_table) is None:
                raise ValueError(f"Unknown table: {preferred_table}")
            primary = preferred_table
        else:
            candidates = rank_candidate_tables(entities, self.catalog)
            if len(candidates) >= 2:
                raise AmbiguousTable(
                    candidates, collect_suggestions(entities, self.max_suggestions)
                )
            primary = self.choose_primary(entities)

        plan = QueryPlan(primary_table=primary, row_limit=self.row_limit)
        self._infer_joins(plan, entities)
        self._route_search_terms(plan, entities)
        logger.debug(
            "Planned primary=%s joins=%s search_terms=%d",
            plan.primary_table,
            plan.joins,
            len(plan.search_terms),
        )
        return plan

    def choose_primary(self, entities: list[EntityMatch]) -> str:
        """Apply the primary-table rules; first match wins."""
        tables: list[str] = []
        for entity in entities:
            if entity.type is EntityType.TABLE and entity.resolved_value not in tables:
                tables.append(entity.resolved_value)
        if len(tables) == 1:
            return tables[0]
        if tables:
            for name in self.catalog.precedence:
                if name in tables:
                    return name
            return tables[0]

        info_tables = {e.table for e in entities if e.type is EntityType.INFO and e.table}
        has_pronoun = any(e.type is EntityType.PRONOUN for e in entities)
        has_numeric = any(e.type is EntityType.NUMERIC_FILTER for e in entities)

        if PRODUCT_TABLE in info_tables and CUSTOMER_TABLE in info_tables:
            return "sales"
        if has_pronoun:
            return "tasks"
        if PRODUCT_TABLE in info_tables and has_numeric:
            return "stock"
        if info_tables == {CUSTOMER_TABLE}:
            return CUSTOMER_TABLE
        if info_tables == {PRODUCT_TABLE}:
            return PRODUCT_TABLE
        if USER_TABLE in info_tables:
            return USER_TABLE
        for entity in entities:
            if entity.type is EntityType.STATUS_FILTER and entity.table:
                return entity.table
        return self.catalog.default_table

    def _infer_joins(self, plan: QueryPlan, entities: list[EntityMatch]) -> None:
        primary = plan.primary_table
        wanted: set[str] = set()

        for entity in entities:
            if entity.type not in (EntityType.TABLE, EntityType.INFO):
                continue
            table = entity.table
            if table is None or table == primary or table in wanted:
                continue
            if self.catalog.join_spec(primary, table) is not None:
                wanted.add(table)
            else:
                plan.diagnostics.append(
                    format_diagnostic(
                        ErrorCode.NO_RELATIONSHIP,
                        f"no relationship from {primary} to {table}; ignoring '{entity.text}'",
                    )
                )

        for entity in entities:
            kind = required_field_kind(entity)
            if kind is None:
                continue
            if self.catalog.field_owner(kind, primary, self._ordered(primary, wanted)) is not None:
                continue
            owner = self.catalog.joinable_owner(kind, primary)
            if owner is not None:
                wanted.add(owner)

        plan.joins = self._ordered(primary, wanted)
        plan.join_paths = []
        for table in plan.joins:
            spec = self.catalog.join_spec(primary, table)
            plan.join_paths.append(
                JoinPath(from_=primary, to=table, on=(spec.local_column, spec.remote_column))
            )

    def _ordered(self, primary: str, tables: set[str]) -> list[str]:
        return [t for t in self.catalog.join_targets(primary) if t in tables]

    def _route_search_terms(self, plan: QueryPlan, entities: list[EntityMatch]) -> None:
        in_scope = plan.tables_in_scope()
        for entity in entities:
            if entity.type is not EntityType.INFO:
                continue
            target = entity.table or plan.primary_table
            if target not in in_scope:
                # Already reported as a missing relationship.
                continue
            spec = self.catalog.table(target)
            if spec is None or not spec.searchable:
                continue
            plan.search_terms.append(
                SearchTerm(table=target, value=str(entity.resolved_value), source_text=entity.text)
            )
