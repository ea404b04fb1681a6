"""End-to-end scenarios: request text in, rows out, against the demo database."""

from __future__ import annotations

import pytest

from querylens.config import QueryLensConfig
from querylens.errors import ExecutorFailure
from querylens.execution.duckdb_store import DuckDBDataStore
from querylens.orchestrator.runtime import QueryEngine, QueryRequest
from querylens.planning.schema import ResponseStatus
from querylens.tagging.models import EntityType

from conftest import FIXED_NOW, _make_db_path


def _ask(engine, text, **kwargs):
    kwargs.setdefault("user_display_name", "Ahmed Hassan")
    return engine.run(QueryRequest(text=text, now=FIXED_NOW, **kwargs))


def _ids(result):
    return [row["id"] for row in result.rows]


# ---------------------------------------------------------------------------
# Core scenarios
# ---------------------------------------------------------------------------

class TestCoreScenarios:

    def test_my_tasks(self, engine):
        result = _ask(engine, "my tasks")
        assert result.ok
        assert result.plan.primary_table == "tasks"
        assert _ids(result) == ["t1", "t2", "t4"]
        assert result.plan.diagnostics == []

    def test_sales_today(self, engine):
        result = _ask(engine, "sales today")
        assert _ids(result) == ["sa1", "sa2"]

    def test_stock_below_10(self, engine):
        result = _ask(engine, "stock below 10")
        assert _ids(result) == ["s1", "s3", "s5", "s7"]
        assert all(row["quantity_available"] < 10 for row in result.rows)

    def test_customers_in_london(self, engine):
        result = _ask(engine, "customers in london")
        assert _ids(result) == ["c1", "c3"]

    def test_laptop_stock_in_paris_below_5(self, engine):
        result = _ask(engine, "laptop stock in paris below 5")
        assert result.plan.joins == ["products"]
        assert _ids(result) == ["s1"]
        assert result.rows[0]["products_name"] == "Gaming Laptop"
        assert result.rows[0]["quantity_available"] == 3


class TestMoreRequests:

    def test_show_me_my_tasks(self, engine):
        result = _ask(engine, "show me my tasks")
        pronouns = [e for e in result.entities if e.type is EntityType.PRONOUN]
        assert [p.text for p in pronouns] == ["my"]
        assert _ids(result) == ["t1", "t2", "t4"]

    def test_my_pending_tasks_this_week(self, engine):
        assert _ids(_ask(engine, "my pending tasks this week")) == ["t1"]

    def test_urgent_tasks(self, engine):
        assert _ids(_ask(engine, "urgent tasks")) == ["t1", "t5"]

    def test_delivered_sales_last_week(self, engine):
        assert _ids(_ask(engine, "delivered sales last week")) == ["sa4"]

    def test_sales_to_customer(self, engine):
        result = _ask(engine, "sales to acme corporation")
        assert result.plan.joins == ["customers"]
        assert _ids(result) == ["sa2"]
        assert result.rows[0]["customers_name"] == "John Doe"

    def test_sales_in_london_joins_customers(self, engine):
        result = _ask(engine, "sales in london")
        assert _ids(result) == ["sa1", "sa3"]

    def test_dropped_filter_still_returns_rows(self, engine):
        result = _ask(engine, "cancelled")
        assert result.ok
        assert result.plan.primary_table == "products"
        assert result.row_count == 9
        assert result.plan.diagnostics[0].startswith("unsupported_filter_for_table")

    def test_unknown_user_keeps_rest_of_plan(self, engine):
        result = _ask(engine, "my pending tasks", user_display_name="Nobody Here")
        assert _ids(result) == ["t1", "t3", "t5"]
        assert result.plan.diagnostics[0].startswith("user_lookup_failed")

    def test_row_limit_and_truncation(self, engine):
        result = _ask(engine, "products", row_limit=3)
        assert result.row_count == 3
        assert result.truncated
        assert result.sql.endswith("LIMIT 4")


# ---------------------------------------------------------------------------
# Clarifications
# ---------------------------------------------------------------------------

class TestClarifications:

    def test_no_entity_found(self, engine):
        result = _ask(engine, "the of")
        assert result.status is ResponseStatus.NO_ENTITY_FOUND
        assert result.rows == []
        assert result.plan is None
        assert result.suggestions == engine.dictionary.examples[:5]
        assert result.message.startswith("I couldn't find anything to look up")

    def test_empty_request(self, engine):
        result = _ask(engine, "")
        assert result.status is ResponseStatus.NO_ENTITY_FOUND

    def test_ambiguous_mouse(self, engine):
        result = _ask(engine, "mouse")
        assert result.status is ResponseStatus.AMBIGUOUS_TABLE
        assert [c.table for c in result.candidates] == ["products", "sales", "stock"]
        assert result.suggestions[0] == "mouse"
        assert result.message == "Which data do you want for 'mouse': products, sales or stock?"
        assert result.rows == []

    def test_answering_the_ambiguity(self, engine):
        result = _ask(engine, "mouse", table="sales")
        assert result.ok
        assert _ids(result) == ["sa1"]
        assert result.rows[0]["products_name"] == "Wireless Mouse"

    def test_unknown_table_choice(self, engine):
        with pytest.raises(ValueError):
            _ask(engine, "mouse", table="invoices")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:

    def test_missing_database(self):
        engine = QueryEngine(DuckDBDataStore(_make_db_path()))
        with pytest.raises(ExecutorFailure) as exc_info:
            _ask(engine, "sales today")
        assert exc_info.value.diagnostic.startswith("executor_failure: ")

    def test_no_store(self):
        engine = QueryEngine()
        with pytest.raises(ExecutorFailure, match="No data store"):
            _ask(engine, "sales today")

    def test_analyze_without_store(self):
        engine = QueryEngine(config=QueryLensConfig(row_limit=10))
        response = engine.analyze(QueryRequest(text="stock below 10", now=FIXED_NOW))
        assert response.ok
        assert response.plan.row_limit == 10
        assert [p.kind for p in response.plan.predicates] == ["numeric"]
