"""Data store adapters and the demo database."""

from querylens.execution.adapter import DataStoreAdapter, ForeignKey, TableDescription
from querylens.execution.demo import DEMO_USER, seed_demo_database
from querylens.execution.duckdb_store import DuckDBDataStore

__all__ = [
    "DEMO_USER",
    "DataStoreAdapter",
    "DuckDBDataStore",
    "ForeignKey",
    "TableDescription",
    "seed_demo_database",
]
