"""Compile filter entities into typed predicates.

Each filter entity is scoped to a column of the primary table or, failing
that, of a joined table. Filters nothing in scope can satisfy are dropped
and reported as plan diagnostics; the rest of the plan is kept.
"""

import logging
from typing import Callable

from querylens.errors import (
    ErrorCode,
    UnsupportedFilterForTable,
    UserLookupFailed,
    format_diagnostic,
)
from querylens.planning.catalog import FieldKind, TableCatalog, default_catalog
from querylens.planning.planner import required_field_kind
from querylens.planning.schema import (
    FilterPredicate,
    LocationPredicate,
    NumericPredicate,
    QueryPlan,
    StatusPredicate,
    TemporalRangePredicate,
    UserScopePredicate,
)
from querylens.tagging.models import EntityMatch, EntityType
from querylens.tagging.tagger import CURRENT_USER

logger = logging.getLogger(__name__)

UserLookup = Callable[[str], str | None]


class FilterCompiler:
    """Turn filter entities into predicates for a planned query.

    Usage:
        compiler = FilterCompiler(catalog, user_lookup=store.find_user_by_name)
        plan.predicates = compiler.compile(entities, plan)
    """

    def __init__(self, catalog: TableCatalog | None = None, user_lookup: UserLookup | None = None):
        """Initialize compiler.

        Args:
            catalog: Table catalog with the per-table field map
            user_lookup: Resolves a display name to a user id, returning
                None when unknown and raising UserLookupFailed on error
        """
        self.catalog = catalog or default_catalog()
        self.user_lookup = user_lookup

    def compile(self, entities: list[EntityMatch], plan: QueryPlan) -> list[FilterPredicate]:
        """Compile entities into predicates.

        Diagnostics for dropped filters are appended to ``plan.diagnostics``.

        Args:
            entities: Tagged entities, sorted by offset
            plan: Plan skeleton from the planner

        Returns:
            Predicates in entity order, without duplicates
        """
        predicates: list[FilterPredicate] = []
        temporal_seen = False

        for entity in entities:
            if entity.type in (EntityType.TABLE, EntityType.INFO):
                continue

            if entity.type is EntityType.TEMPORAL:
                if temporal_seen:
                    plan.diagnostics.append(
                        format_diagnostic(
                            ErrorCode.IGNORED_TEMPORAL,
                            f"only the first time range is applied; ignoring '{entity.text}'",
                        )
                    )
                    continue
                temporal_seen = True

            try:
                predicate = self._compile_entity(entity, plan)
            except (UnsupportedFilterForTable, UserLookupFailed) as e:
                logger.info("Dropping filter %r: %s", entity.text, e.message)
                plan.diagnostics.append(e.diagnostic)
                continue

            if predicate not in predicates:
                predicates.append(predicate)

        return predicates

    def _compile_entity(self, entity: EntityMatch, plan: QueryPlan) -> FilterPredicate:
        kind = required_field_kind(entity)
        if kind is None:
            raise ValueError(f"Not a filter entity: {entity.type}")
        table, column = self._resolve_field(kind, entity, plan)

        if entity.type is EntityType.NUMERIC_FILTER:
            value = entity.resolved_value
            return NumericPredicate(table=table, field=column, op=value.operator, value=value.value)

        if entity.type is EntityType.STATUS_FILTER:
            return StatusPredicate(table=table, field=column, value=str(entity.resolved_value))

        if entity.type is EntityType.LOCATION_FILTER:
            return LocationPredicate(table=table, field=column, value=str(entity.resolved_value))

        if entity.type is EntityType.TEMPORAL:
            value = entity.resolved_value
            return TemporalRangePredicate(
                table=table,
                field=column,
                start=value.start,
                end=value.end,
                single_day=value.single_day,
                label=value.label,
            )

        # Pronoun
        display_name = str(entity.resolved_value)
        user_id = self._lookup_user(display_name)
        return UserScopePredicate(
            table=table, field=column, user_id=user_id, display_name=display_name
        )

    def _resolve_field(
        self, kind: FieldKind, entity: EntityMatch, plan: QueryPlan
    ) -> tuple[str, str]:
        owner = self.catalog.field_owner(kind, plan.primary_table, plan.joins)
        if owner is None:
            raise UnsupportedFilterForTable(
                entity.type.value, plan.primary_table, entity.text
            )
        return owner

    def _lookup_user(self, display_name: str) -> str:
        if display_name == CURRENT_USER:
            raise UserLookupFailed(None, "no current user in context")
        if self.user_lookup is None:
            raise UserLookupFailed(display_name, "no user directory configured")
        user_id = self.user_lookup(display_name)
        if user_id is None:
            raise UserLookupFailed(display_name, "no matching user")
        return str(user_id)
