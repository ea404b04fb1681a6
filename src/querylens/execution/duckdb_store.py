"""DuckDB implementation of the data store adapter."""

import logging
from pathlib import Path

from querylens.errors import ExecutorFailure, UserLookupFailed
from querylens.execution.adapter import ColumnInfo, ForeignKey, TableDescription
from querylens.planning.catalog import TableCatalog, default_catalog
from querylens.planning.schema import QueryPlan
from querylens.sql.builder import build_select, quote_identifier
from querylens.sql.guardrails import GuardrailConfig
from querylens.sql.safe_executor import ExecutionResult, SafeSQLExecutor

logger = logging.getLogger(__name__)

NUMERIC_TYPES = {
    "TINYINT", "SMALLINT", "INTEGER", "BIGINT", "HUGEINT", "UTINYINT", "USMALLINT",
    "UINTEGER", "UBIGINT", "FLOAT", "REAL", "DOUBLE",
}
TEXT_TYPES = {"VARCHAR", "TEXT", "STRING"}


def _is_numeric(data_type: str) -> bool:
    upper = data_type.upper()
    return upper in NUMERIC_TYPES or upper.startswith("DECIMAL") or upper.startswith("NUMERIC")


class DuckDBDataStore:
    """Run query plans against a DuckDB database file.

    Usage:
        store = DuckDBDataStore("data/querylens.duckdb")
        result = store.execute(plan)
    """

    def __init__(
        self,
        db_path: Path | str,
        catalog: TableCatalog | None = None,
        *,
        guardrails: GuardrailConfig | None = None,
    ):
        """Initialize store.

        Args:
            db_path: Path to DuckDB database
            catalog: Table catalog used to render plans
            guardrails: Optional guardrail configuration for the executor
        """
        self.db_path = Path(db_path)
        self.catalog = catalog or default_catalog()
        self.executor = SafeSQLExecutor(self.db_path, config=guardrails)

    def execute(self, plan: QueryPlan) -> ExecutionResult:
        """Execute a compiled plan.

        One extra row is fetched so that truncation at ``plan.row_limit``
        can be reported. The extra row must survive the guardrail LIMIT
        cap, so the row limit is capped one below ``max_limit``.
        """
        row_limit = plan.row_limit
        cap = self.executor.config.max_limit - 1
        if cap >= 1 and row_limit > cap:
            logger.info("Row limit %d capped to %d", row_limit, cap)
            row_limit = cap
        sql, params = build_select(plan, self.catalog, limit=row_limit + 1)
        logger.debug("Executing %s with %s", sql, params)
        result = self.executor.execute(sql, parameters=params)
        if result.success and result.row_count > row_limit:
            result.rows = result.rows[:row_limit]
            result.row_count = row_limit
            result.truncated = True
        return result

    def find_user_by_name(self, display_name: str) -> str | None:
        """Resolve a user's full name (case-insensitive) to their id."""
        sql = 'SELECT "id" FROM "users" WHERE lower("full_name") = lower(?) ORDER BY "id" LIMIT 1'
        result = self.executor.execute(sql, parameters=[display_name])
        if not result.success:
            raise UserLookupFailed(display_name, result.error or "lookup query failed")
        if not result.rows:
            return None
        return str(result.rows[0]["id"])

    def describe_table(self, name: str) -> TableDescription:
        """Describe a table from information_schema plus the catalog.

        Raises:
            ValueError: If the name is invalid or the table does not exist
            ExecutorFailure: If the database cannot be queried
        """
        quoted = quote_identifier(name)
        result = self.executor.execute(
            "SELECT column_name, data_type FROM information_schema.columns "
            "WHERE table_name = ? ORDER BY ordinal_position",
            parameters=[name],
            skip_validation=True,
        )
        if not result.success:
            raise ExecutorFailure(result.error or "describe failed", sql=result.sql_executed)
        if not result.rows:
            raise ValueError(f"Unknown table: {name}")

        columns = [ColumnInfo(name=r["column_name"], data_type=r["data_type"]) for r in result.rows]
        spec = self.catalog.table(name)
        if spec is not None:
            searchable = list(spec.searchable)
        else:
            searchable = [c.name for c in columns if c.data_type.upper() in TEXT_TYPES]

        count = self.executor.execute(f"SELECT COUNT(*) AS n FROM {quoted}", skip_validation=True)

        return TableDescription(
            name=name,
            columns=columns,
            searchable_fields=searchable,
            numeric_fields=[c.name for c in columns if _is_numeric(c.data_type)],
            foreign_keys=[
                ForeignKey(
                    column=j.local_column,
                    references_table=j.table,
                    references_column=j.remote_column,
                )
                for j in self.catalog.joins.get(name, ())
            ],
            row_count=count.rows[0]["n"] if count.success and count.rows else None,
        )
