"""Tests for FilterCompiler: predicates, scoping and soft errors."""

from datetime import date

from querylens.planning.filters import FilterCompiler
from querylens.planning.schema import (
    LocationPredicate,
    NumericPredicate,
    StatusPredicate,
    TemporalRangePredicate,
    UserScopePredicate,
)
from querylens.tagging.models import ComparisonOperator, UserContext


def _compile(tagger, planner, compiler, context, text):
    entities = tagger.tag(text, context)
    plan = planner.plan(entities, text)
    plan.predicates = compiler.compile(entities, plan)
    return plan


def test_user_scope(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "my tasks")
    assert plan.predicates == [
        UserScopePredicate(
            table="tasks", field="assigned_to", user_id="u1", display_name="Ahmed Hassan"
        )
    ]
    assert plan.diagnostics == []


def test_single_day_temporal(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "sales today")
    assert plan.predicates == [
        TemporalRangePredicate(
            table="sales",
            field="created_at",
            start=date(2025, 8, 6),
            end=date(2025, 8, 7),
            single_day=True,
            label="today",
        )
    ]


def test_numeric(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "stock below 10")
    assert plan.predicates == [
        NumericPredicate(
            table="stock", field="quantity_available", op=ComparisonOperator.LT, value=10
        )
    ]


def test_location_on_primary(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "customers in london")
    assert plan.predicates == [LocationPredicate(table="customers", field="city", value="london")]


def test_location_on_joined_table(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "sales in london")
    assert plan.predicates == [LocationPredicate(table="customers", field="city", value="london")]


def test_priority_uses_priority_column(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "urgent tasks")
    assert plan.predicates == [StatusPredicate(table="tasks", field="priority", value="high")]


def test_laptop_stock_predicates(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "laptop stock in paris below 5")
    assert [p.kind for p in plan.predicates] == ["location", "numeric"]
    assert {(p.table, p.field) for p in plan.predicates} == {
        ("stock", "warehouse_location"),
        ("stock", "quantity_available"),
    }
    # info terms never become predicates
    assert all(p.table != "products" for p in plan.predicates)


def test_unsupported_filter_is_dropped(tagger, planner, compiler, context):
    """Products have no status column and no joins: the filter is dropped."""
    plan = _compile(tagger, planner, compiler, context, "cancelled")
    assert plan.primary_table == "products"
    assert plan.predicates == []
    assert len(plan.diagnostics) == 1
    assert plan.diagnostics[0].startswith("unsupported_filter_for_table: ")


def test_dropped_filter_keeps_other_predicates(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "products in paris above 100")
    assert plan.predicates == [
        NumericPredicate(table="products", field="price", op=ComparisonOperator.GT, value=100)
    ]
    assert [d.split(":")[0] for d in plan.diagnostics] == ["unsupported_filter_for_table"]


def test_missing_display_name(tagger, planner, compiler, fixed_now):
    plan = _compile(tagger, planner, compiler, UserContext(now=fixed_now), "my tasks")
    assert plan.predicates == []
    assert plan.diagnostics[0].startswith("user_lookup_failed: ")


def test_unknown_user(tagger, planner, compiler, fixed_now):
    context = UserContext(display_name="Nobody Here", now=fixed_now)
    plan = _compile(tagger, planner, compiler, context, "my tasks")
    assert plan.predicates == []
    assert "Nobody Here" in plan.diagnostics[0]


def test_no_user_directory(tagger, planner, context):
    compiler = FilterCompiler()
    plan = _compile(tagger, planner, compiler, context, "my tasks")
    assert plan.predicates == []
    assert plan.diagnostics[0].startswith("user_lookup_failed: ")


def test_only_first_temporal_applies(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "sales today and yesterday")
    temporal = [p for p in plan.predicates if p.kind == "temporal_range"]
    assert len(temporal) == 1
    assert temporal[0].label == "today"
    assert plan.diagnostics[0].startswith("ignored_temporal: ")


def test_duplicate_predicates_collapse(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "pending tasks waiting")
    assert plan.predicates == [StatusPredicate(table="tasks", field="status", value="pending")]


def test_predicates_serialise_with_kind(tagger, planner, compiler, context):
    plan = _compile(tagger, planner, compiler, context, "my pending tasks this week")
    dumped = plan.model_dump(mode="json", by_alias=True)
    assert [p["kind"] for p in dumped["predicates"]] == ["user_scope", "status", "temporal_range"]
    assert dumped["predicates"][2]["start"] == "2025-08-04"
