"""Request orchestration for the QueryLens pipeline."""

from querylens.orchestrator.runtime import QueryEngine, QueryRequest

__all__ = ["QueryEngine", "QueryRequest"]
