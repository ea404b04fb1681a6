"""Guardrail checks applied before any SQL reaches DuckDB."""

from __future__ import annotations

import pytest

from querylens.planning.catalog import default_catalog
from querylens.planning.schema import LocationPredicate, QueryPlan, SearchTerm
from querylens.sql.builder import build_select
from querylens.sql.guardrails import (
    GuardrailConfig,
    detect_dangerous_keywords,
    detect_dangerous_patterns,
    enforce_limit,
    validate_sql,
)
from querylens.sql.safe_executor import SafeSQLExecutor


# ---------------------------------------------------------------------------
# Statement validation
# ---------------------------------------------------------------------------

class TestValidateSql:
    """Only single read statements pass."""

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM sales LIMIT 5",
            "with x as (select 1) select * from x",
            'SELECT "sales"."updated_at" FROM "sales"',
            "SELECT * FROM tasks WHERE title = 'please DROP everything'",
            "SELECT 1;",
        ],
    )
    def test_allowed(self, sql):
        assert validate_sql(sql).is_valid

    @pytest.mark.parametrize(
        "sql,fragment",
        [
            ("", "Empty"),
            ("DROP TABLE sales", "must start with"),
            ("SELECT * FROM sales; DELETE FROM sales", "Blocked keyword"),
            ("SELECT * FROM sales -- comment", "Pattern"),
            ("SELECT * FROM sales /* hidden */", "Pattern"),
            ("SELECT id FROM sales UNION SELECT id FROM users", "Pattern"),
            ("SELECT * FROM read_csv('/etc/passwd')", "Pattern"),
            ("SELECT 1; SELECT 2", "Multiple statements"),
        ],
    )
    def test_rejected(self, sql, fragment):
        result = validate_sql(sql)
        assert not result.is_valid
        assert fragment in result.error

    def test_missing_limit_warns(self):
        result = validate_sql("SELECT * FROM sales")
        assert result.is_valid
        assert result.warnings and "LIMIT" in result.warnings[0]


def test_keywords_inside_identifiers_are_ignored():
    assert detect_dangerous_keywords('SELECT "set", "update" FROM t') == []
    assert detect_dangerous_keywords("SELECT updated_at, created_by FROM t") == []
    assert detect_dangerous_keywords("SELECT 1; UPDATE t SET a = 1") == ["UPDATE", "SET"]


def test_patterns_ignore_string_literals():
    assert detect_dangerous_patterns("SELECT * FROM t WHERE note = '-- not a comment'") is None


def test_enforce_limit():
    config = GuardrailConfig(default_limit=50, max_limit=200)
    assert enforce_limit("SELECT * FROM sales;", config) == "SELECT * FROM sales LIMIT 50"
    assert enforce_limit("SELECT * FROM sales LIMIT 10", config) == "SELECT * FROM sales LIMIT 10"
    assert enforce_limit("SELECT * FROM sales LIMIT 5000", config) == "SELECT * FROM sales LIMIT 200"


def test_built_plans_pass_guardrails():
    """Hostile request text only ever reaches SQL as a bound parameter."""
    hostile = "x'; DROP TABLE customers; --"
    plan = QueryPlan(
        primary_table="customers",
        predicates=[LocationPredicate(table="customers", field="city", value=hostile)],
        search_terms=[SearchTerm(table="customers", value=hostile, source_text=hostile)],
    )
    sql, params = build_select(plan, default_catalog())
    assert validate_sql(sql).is_valid
    assert all(hostile in p for p in params)


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

class TestSafeExecutor:

    def test_parameterised_select(self, demo_db):
        executor = SafeSQLExecutor(demo_db)
        result = executor.execute(
            "SELECT id FROM customers WHERE city = ? ORDER BY id LIMIT 10", parameters=["London"]
        )
        assert result.success, result.error
        assert [r["id"] for r in result.rows] == ["c1", "c3"]
        assert result.columns == ["id"]
        assert result.parameters == ["London"]

    def test_rejected_sql_never_runs(self, demo_db):
        executor = SafeSQLExecutor(demo_db)
        result = executor.execute("DELETE FROM customers")
        assert not result.success
        assert result.sql_executed == ""
        check = executor.execute("SELECT count(*) AS n FROM customers")
        assert check.rows[0]["n"] == 5

    def test_limit_enforced(self, demo_db):
        executor = SafeSQLExecutor(demo_db, GuardrailConfig(default_limit=2))
        result = executor.execute("SELECT * FROM products")
        assert result.row_count == 2
        assert any("LIMIT enforced" in w for w in result.warnings)

    def test_limit_capped_reports_max_limit(self, demo_db):
        executor = SafeSQLExecutor(demo_db, GuardrailConfig(default_limit=7, max_limit=2))
        result = executor.execute("SELECT * FROM products LIMIT 50")
        assert result.row_count == 2
        assert "LIMIT capped: 2" in result.warnings
        assert not any("LIMIT enforced" in w for w in result.warnings)

    def test_database_error_is_reported(self, demo_db):
        result = SafeSQLExecutor(demo_db).execute("SELECT * FROM invoices")
        assert not result.success
        assert result.error.startswith("Database error")

    def test_max_result_rows(self, demo_db):
        executor = SafeSQLExecutor(demo_db, GuardrailConfig(max_result_rows=3))
        result = executor.execute("SELECT * FROM products LIMIT 50")
        assert result.truncated
        assert result.row_count == 3
        assert result.total_rows_available == 9
