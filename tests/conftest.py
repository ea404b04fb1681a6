"""Shared test fixtures for the querylens test suite.

* ``fixed_now``  -- Wednesday 2025-08-06 14:30, so week and month ranges are known
* ``tagger`` / ``planner`` / ``compiler`` -- built-in dictionary and catalog
* ``demo_db``    -- temporary DuckDB file seeded with the demo tables at ``fixed_now``
* ``store`` / ``engine`` -- DuckDB-backed store and engine over ``demo_db``
"""

from __future__ import annotations

import logging
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from querylens.config import QueryLensConfig
from querylens.dictionary.defaults import default_dictionary
from querylens.execution.demo import seed_demo_database
from querylens.execution.duckdb_store import DuckDBDataStore
from querylens.orchestrator.runtime import QueryEngine
from querylens.planning.catalog import default_catalog
from querylens.planning.filters import FilterCompiler
from querylens.planning.planner import QueryPlanner
from querylens.tagging.models import UserContext
from querylens.tagging.tagger import EntityTagger

FIXED_NOW = datetime(2025, 8, 6, 14, 30)
DEMO_USER_IDS = {"ahmed hassan": "u1", "jane smith": "u2"}


def _make_db_path() -> Path:
    """Create a temporary file for DuckDB and remove it so DuckDB can own it."""
    with tempfile.NamedTemporaryFile(suffix=".duckdb", delete=False) as f:
        db_path = Path(f.name)
    db_path.unlink()  # DuckDB needs to create the file itself
    return db_path


def fake_user_lookup(display_name: str) -> str | None:
    return DEMO_USER_IDS.get(display_name.lower())


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def context() -> UserContext:
    return UserContext(display_name="Ahmed Hassan", now=FIXED_NOW)


@pytest.fixture()
def tagger() -> EntityTagger:
    return EntityTagger(default_dictionary())


@pytest.fixture()
def planner() -> QueryPlanner:
    return QueryPlanner(default_catalog())


@pytest.fixture()
def compiler() -> FilterCompiler:
    return FilterCompiler(default_catalog(), user_lookup=fake_user_lookup)


@pytest.fixture()
def demo_db():
    """DuckDB file with the eight demo tables, timestamps relative to FIXED_NOW."""
    db_path = _make_db_path()
    seed_demo_database(db_path, now=FIXED_NOW)
    yield db_path
    db_path.unlink(missing_ok=True)


@pytest.fixture()
def store(demo_db) -> DuckDBDataStore:
    return DuckDBDataStore(demo_db)


@pytest.fixture()
def engine(store) -> QueryEngine:
    return QueryEngine(store, config=QueryLensConfig(db_path=store.db_path))


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo setup_logging() calls made by CLI and logging tests."""
    logger = logging.getLogger("querylens")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]
