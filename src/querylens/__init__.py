"""QueryLens: natural-language lookups over a relational business database.

The pipeline tags a free-text request into typed entities, plans which table
to read and which tables to join, compiles the entities into structured
filter predicates and hands the plan to a data store adapter.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
