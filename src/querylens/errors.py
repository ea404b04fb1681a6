"""Error taxonomy for the QueryLens pipeline.

Hard errors (``NoEntityFound``, ``AmbiguousTable``, ``ExecutorFailure``)
stop a request and are turned into a clarification or failure response by
the engine. Soft errors (``UnsupportedFilterForTable``, ``UserLookupFailed``)
are raised inside the filter compiler, caught there, and recorded as plan
diagnostics while the rest of the plan stays intact.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable codes used as diagnostic prefixes."""

    NO_ENTITY_FOUND = "no_entity_found"
    AMBIGUOUS_TABLE = "ambiguous_table"
    UNSUPPORTED_FILTER_FOR_TABLE = "unsupported_filter_for_table"
    USER_LOOKUP_FAILED = "user_lookup_failed"
    EXECUTOR_FAILURE = "executor_failure"
    NO_RELATIONSHIP = "no_relationship"
    IGNORED_TEMPORAL = "ignored_temporal"
    DICTIONARY_ERROR = "dictionary_error"


def format_diagnostic(code: ErrorCode, message: str) -> str:
    """Render a diagnostic string as ``<code>: <message>``."""
    return f"{code.value}: {message}"


class QueryLensError(Exception):
    """Base class for every error raised by the pipeline."""

    code: ErrorCode = ErrorCode.EXECUTOR_FAILURE

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def diagnostic(self) -> str:
        return format_diagnostic(self.code, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "details": self.details}


class NoEntityFound(QueryLensError):
    """The request produced zero entities."""

    code = ErrorCode.NO_ENTITY_FOUND

    def __init__(self, text: str, suggestions: list[str] | None = None):
        self.text = text
        self.suggestions = list(suggestions or [])
        super().__init__(
            f"Could not recognise anything to look up in {text!r}",
            details={"suggestions": self.suggestions},
        )


class AmbiguousTable(QueryLensError):
    """More than one table could answer the request and nothing decides between them."""

    code = ErrorCode.AMBIGUOUS_TABLE

    def __init__(self, candidates: list[Any], suggestions: list[str] | None = None):
        self.candidates = list(candidates)
        self.suggestions = list(suggestions or [])
        names = [getattr(c, "table", c) for c in self.candidates]
        super().__init__(
            f"Request could refer to several tables: {', '.join(names)}",
            details={"candidates": names, "suggestions": self.suggestions},
        )


class UnsupportedFilterForTable(QueryLensError):
    """A filter needs a column that neither the primary nor any joined table has."""

    code = ErrorCode.UNSUPPORTED_FILTER_FOR_TABLE

    def __init__(self, filter_kind: str, table: str, text: str):
        self.filter_kind = filter_kind
        self.table = table
        self.text = text
        super().__init__(
            f"{filter_kind} filter '{text}' is not supported for table {table}",
            details={"filter_kind": filter_kind, "table": table, "text": text},
        )


class UserLookupFailed(QueryLensError):
    """The current user could not be resolved to a user id."""

    code = ErrorCode.USER_LOOKUP_FAILED

    def __init__(self, display_name: str | None, reason: str):
        self.display_name = display_name
        self.reason = reason
        who = display_name or "current user"
        super().__init__(
            f"could not resolve {who}: {reason}",
            details={"display_name": display_name},
        )


class ExecutorFailure(QueryLensError):
    """The data store adapter failed to execute a plan."""

    code = ErrorCode.EXECUTOR_FAILURE

    def __init__(self, message: str, *, sql: str | None = None):
        self.sql = sql
        super().__init__(message, details={"sql": sql})


class DictionaryError(QueryLensError):
    """A term dictionary file could not be loaded or failed validation."""

    code = ErrorCode.DICTIONARY_ERROR
