"""Data store contract used by the query engine.

The engine never talks to a database directly: it hands compiled plans to
an adapter, asks it to resolve the current user, and asks it to describe
tables for the CLI.
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from querylens.planning.schema import QueryPlan
from querylens.sql.safe_executor import ExecutionResult


class ForeignKey(BaseModel):
    column: str
    references_table: str
    references_column: str = "id"


class ColumnInfo(BaseModel):
    name: str
    data_type: str


class TableDescription(BaseModel):
    """Columns of a table as seen by the data store."""

    name: str
    columns: list[ColumnInfo] = Field(default_factory=list)
    searchable_fields: list[str] = Field(default_factory=list)
    numeric_fields: list[str] = Field(default_factory=list)
    foreign_keys: list[ForeignKey] = Field(default_factory=list)
    row_count: int | None = None


@runtime_checkable
class DataStoreAdapter(Protocol):
    """What the engine needs from a data store."""

    def execute(self, plan: QueryPlan) -> ExecutionResult:
        """Run a compiled plan; failures are reported in the result."""
        ...

    def find_user_by_name(self, display_name: str) -> str | None:
        """Return the user id for a display name, or None when not found.

        Raises:
            UserLookupFailed: If the directory could not be queried
        """
        ...

    def describe_table(self, name: str) -> TableDescription:
        """Describe the columns of a table.

        Raises:
            ValueError: If the table does not exist
        """
        ...
