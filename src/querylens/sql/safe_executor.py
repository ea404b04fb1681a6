"""Guarded, read-only DuckDB execution.

Each call opens a short-lived read-only connection, validates the statement,
enforces a LIMIT, binds parameters positionally and caps the returned rows.
Failures are reported through ``ExecutionResult.error`` rather than raised.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

import duckdb

from querylens.sql.guardrails import GuardrailConfig, enforce_limit, has_limit_clause, validate_sql

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Result of a safe SQL execution."""

    success: bool
    rows: list[dict[str, Any]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    row_count: int = 0
    total_rows_available: int = 0  # Before capping
    truncated: bool = False
    execution_time_ms: float = 0.0
    sql_executed: str = ""
    sql_original: str = ""
    parameters: list[Any] = field(default_factory=list)
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    executed_at: str = ""


class SafeSQLExecutor:
    """Safe SQL executor with configurable guardrails.

    Usage:
        executor = SafeSQLExecutor(db_path)
        result = executor.execute('SELECT * FROM "tasks" WHERE "status" = ?', parameters=["pending"])
        if result.success:
            for row in result.rows:
                ...
    """

    def __init__(
        self,
        db_path: Path | str,
        config: GuardrailConfig | None = None,
        read_only: bool = True,
    ):
        """Initialize safe SQL executor.

        Args:
            db_path: Path to DuckDB database
            config: Optional guardrail configuration
            read_only: Whether to open connections in read-only mode (default True)
        """
        self.db_path = Path(db_path)
        self.config = config or GuardrailConfig()
        self.read_only = read_only

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        """Create a fresh connection per execution."""
        return duckdb.connect(str(self.db_path), read_only=self.read_only)

    def execute(
        self,
        sql: str,
        *,
        parameters: Sequence[Any] | None = None,
        skip_validation: bool = False,
    ) -> ExecutionResult:
        """Execute SQL query with safety guardrails.

        Args:
            sql: SQL query with ``?`` placeholders
            parameters: Positional parameters bound to the placeholders
            skip_validation: Skip validation (for internal catalog queries)

        Returns:
            ExecutionResult with rows, columns, and metadata
        """
        executed_at = datetime.now(timezone.utc).isoformat()
        params = list(parameters or [])
        warnings: list[str] = []

        if not skip_validation:
            validation = validate_sql(sql, self.config)
            if not validation.is_valid:
                logger.warning("Rejected SQL: %s", validation.error)
                return ExecutionResult(
                    success=False,
                    error=validation.error,
                    sql_original=sql,
                    parameters=params,
                    executed_at=executed_at,
                )
            if validation.warnings:
                warnings.extend(validation.warnings)

        sql_with_limit = enforce_limit(sql, self.config)
        if not has_limit_clause(sql):
            warnings.append(f"LIMIT enforced: {self.config.default_limit}")
        elif sql_with_limit != sql.strip().rstrip(";"):
            warnings.append(f"LIMIT capped: {self.config.max_limit}")

        start_time = time.perf_counter()
        conn: duckdb.DuckDBPyConnection | None = None
        try:
            conn = self._get_connection()
            result = conn.execute(sql_with_limit, params) if params else conn.execute(sql_with_limit)
            raw_rows = result.fetchall()
            columns = [desc[0] for desc in result.description] if result.description else []
        except duckdb.Error as e:
            execution_time_ms = (time.perf_counter() - start_time) * 1000
            logger.warning("Database error: %s", e)
            return ExecutionResult(
                success=False,
                error=f"Database error: {e}",
                execution_time_ms=round(execution_time_ms, 2),
                sql_executed=sql_with_limit,
                sql_original=sql,
                parameters=params,
                warnings=warnings,
                executed_at=executed_at,
            )
        finally:
            if conn is not None:
                conn.close()

        execution_time_ms = (time.perf_counter() - start_time) * 1000

        total_rows = len(raw_rows)
        truncated = False
        if total_rows > self.config.max_result_rows:
            raw_rows = raw_rows[: self.config.max_result_rows]
            truncated = True
            warnings.append(
                f"Results truncated from {total_rows} to {self.config.max_result_rows} rows"
            )

        rows = [dict(zip(columns, row)) for row in raw_rows]
        logger.debug("Executed in %.2fms, %d rows", execution_time_ms, len(rows))

        return ExecutionResult(
            success=True,
            rows=rows,
            columns=columns,
            row_count=len(rows),
            total_rows_available=total_rows,
            truncated=truncated,
            execution_time_ms=round(execution_time_ms, 2),
            sql_executed=sql_with_limit,
            sql_original=sql,
            parameters=params,
            warnings=warnings,
            executed_at=executed_at,
        )
