"""SQL rendering, guardrails and guarded execution."""

from querylens.sql.builder import build_select, quote_identifier
from querylens.sql.guardrails import GuardrailConfig, ValidationResult, enforce_limit, validate_sql
from querylens.sql.safe_executor import ExecutionResult, SafeSQLExecutor

__all__ = [
    "ExecutionResult",
    "GuardrailConfig",
    "SafeSQLExecutor",
    "ValidationResult",
    "build_select",
    "enforce_limit",
    "quote_identifier",
    "validate_sql",
]
