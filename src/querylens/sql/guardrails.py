"""SQL guardrails for read-only plan execution.

Every statement the data store runs passes through these checks:

- SELECT/WITH/EXPLAIN only
- no write or administrative keywords outside quoted identifiers and literals
- no stacked statements, comments or known injection patterns
- a LIMIT that never exceeds the configured maximum
"""

import re
from dataclasses import dataclass
from typing import NamedTuple


class ValidationResult(NamedTuple):
    """Result of SQL validation."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] | None = None


@dataclass
class GuardrailConfig:
    """Configuration for SQL guardrails."""

    # Limits
    default_limit: int = 100
    max_limit: int = 1000
    max_result_rows: int = 1000

    # Blocked keywords (case-insensitive, word boundaries)
    blocked_keywords: tuple[str, ...] = (
        "DROP",
        "DELETE",
        "UPDATE",
        "INSERT",
        "ALTER",
        "TRUNCATE",
        "GRANT",
        "REVOKE",
        "CREATE",
        "REPLACE",
        "EXECUTE",
        "EXEC",
        "CALL",
        "SET",
        "PRAGMA",
        "ATTACH",
        "DETACH",
        "COPY",
        "LOAD",
        "INSTALL",
        "EXPORT",
        "IMPORT",
    )

    # Additional patterns to block (regex)
    blocked_patterns: tuple[str, ...] = (
        r";\s*(DROP|DELETE|UPDATE|INSERT|ALTER|TRUNCATE)",  # Piggyback attacks
        r"--",  # Line comments
        r"/\*.*\*/",  # Block comments
        r"\bUNION\s+(ALL\s+)?SELECT\b",
        r"\bINTO\s+OUTFILE\b",
        r"\bread_(csv|parquet|json)\w*\s*\(",  # DuckDB file readers
        r"\bxp_\w+",  # SQL Server extended procedures
        r"\bsp_\w+",  # SQL Server stored procedures
    )

    # Allowed statement prefixes (case-insensitive)
    allowed_prefixes: tuple[str, ...] = ("SELECT", "WITH", "EXPLAIN")


# Default configuration
DEFAULT_CONFIG = GuardrailConfig()


def validate_sql(sql: str, config: GuardrailConfig | None = None) -> ValidationResult:
    """Validate SQL query against safety rules.

    Args:
        sql: SQL query string to validate
        config: Optional guardrail configuration

    Returns:
        ValidationResult with is_valid flag and optional error message
    """
    if config is None:
        config = DEFAULT_CONFIG

    if not sql or not sql.strip():
        return ValidationResult(is_valid=False, error="Empty SQL query")

    sql_upper = sql.strip().upper()
    if not any(sql_upper.startswith(prefix) for prefix in config.allowed_prefixes):
        return ValidationResult(
            is_valid=False,
            error=f"Query must start with one of: {', '.join(config.allowed_prefixes)}",
        )

    blocked = detect_dangerous_keywords(sql, config)
    if blocked:
        return ValidationResult(
            is_valid=False,
            error=f"Blocked keyword(s) detected: {', '.join(blocked)}",
        )

    pattern_match = detect_dangerous_patterns(sql, config)
    if pattern_match:
        return ValidationResult(is_valid=False, error=f"Dangerous pattern detected: {pattern_match}")

    warnings = []
    if not has_limit_clause(sql):
        warnings.append("Query has no LIMIT clause; one will be enforced")

    return ValidationResult(is_valid=True, warnings=warnings or None)


def detect_dangerous_keywords(sql: str, config: GuardrailConfig | None = None) -> list[str]:
    """Detect blocked keywords outside quoted identifiers and string literals.

    Args:
        sql: SQL query string
        config: Optional guardrail configuration

    Returns:
        List of detected blocked keywords (empty if none)
    """
    if config is None:
        config = DEFAULT_CONFIG

    sql_upper = _remove_string_literals(sql).upper()
    # "UPDATED_AT" must not match "UPDATE"
    return [kw for kw in config.blocked_keywords if re.search(rf"\b{kw}\b", sql_upper)]


def detect_dangerous_patterns(sql: str, config: GuardrailConfig | None = None) -> str | None:
    """Detect dangerous patterns in SQL query.

    Args:
        sql: SQL query string
        config: Optional guardrail configuration

    Returns:
        Description of matched pattern, or None if safe
    """
    if config is None:
        config = DEFAULT_CONFIG

    sql_no_strings = _remove_string_literals(sql)
    for pattern in config.blocked_patterns:
        if re.search(pattern, sql_no_strings, re.IGNORECASE | re.DOTALL):
            return f"Pattern: {pattern}"

    # Only a single trailing semicolon is allowed
    body = sql_no_strings.strip()
    if body.endswith(";"):
        body = body[:-1]
    if ";" in body:
        return "Multiple statements detected (only single SELECT allowed)"

    return None


def enforce_limit(sql: str, config: GuardrailConfig | None = None) -> str:
    """Enforce LIMIT clause on SQL query.

    If query has no LIMIT, add the default limit.
    If query has LIMIT exceeding max, reduce to max.

    Args:
        sql: SQL query string
        config: Optional guardrail configuration

    Returns:
        SQL with LIMIT enforced
    """
    if config is None:
        config = DEFAULT_CONFIG

    sql_clean = sql.strip().rstrip(";")
    limit_match = re.search(r"\bLIMIT\s+(\d+)\s*(?:OFFSET\s+\d+)?\s*$", sql_clean, re.IGNORECASE)

    if limit_match:
        if int(limit_match.group(1)) > config.max_limit:
            start, end = limit_match.span(1)
            return f"{sql_clean[:start]}{config.max_limit}{sql_clean[end:]}"
        return sql_clean

    return f"{sql_clean} LIMIT {config.default_limit}"


def has_limit_clause(sql: str) -> bool:
    """Check if SQL has a LIMIT clause."""
    return bool(re.search(r"\bLIMIT\s+\d+", sql, re.IGNORECASE))


def _remove_string_literals(sql: str) -> str:
    """Replace 'string' literals and "quoted" identifiers with empty quotes."""
    sql = re.sub(r"'([^']|'')*'", "''", sql)
    sql = re.sub(r'"([^"]|"")*"', '""', sql)
    return sql
