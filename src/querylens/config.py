"""Runtime configuration for QueryLens.

Values come from ``QL_*`` environment variables with safe defaults, so the
CLI and the engine can run without any configuration file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class QueryLensConfig:
    """Configuration shared by the CLI and the query engine."""

    db_path: Path = Path("./data/querylens.duckdb")
    row_limit: int = 100
    max_suggestions: int = 5
    dictionary_path: Path | None = None
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "QueryLensConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            QueryLensConfig populated from ``QL_*`` variables

        Raises:
            ValueError: If a numeric variable is not a positive integer
        """
        env = os.environ if environ is None else environ
        dictionary_path = env.get("QL_DICTIONARY_PATH")
        return cls(
            db_path=Path(env.get("QL_DB_PATH", str(cls.db_path))),
            row_limit=_env_int(env, "QL_ROW_LIMIT", cls.row_limit),
            max_suggestions=_env_int(env, "QL_MAX_SUGGESTIONS", cls.max_suggestions),
            dictionary_path=Path(dictionary_path) if dictionary_path else None,
            log_level=env.get("QL_LOG_LEVEL", cls.log_level).upper(),
            log_json=_env_bool(env, "QL_LOG_JSON", cls.log_json),
        )
