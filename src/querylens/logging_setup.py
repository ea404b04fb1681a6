"""Process-wide logging setup with JSON or text output and correlation ids."""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar

_corr_id: ContextVar[str | None] = ContextVar("_corr_id", default=None)


def set_corr_id(value: str | None = None) -> str:
    cid = value or uuid.uuid4().hex[:12]
    _corr_id.set(cid)
    return cid


def get_corr_id() -> str | None:
    return _corr_id.get()


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": int(time.time() * 1000),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "corr_id": get_corr_id(),
        }
        if isinstance(record.args, dict):
            base.update(record.args)
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


class _CorrIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.corr_id = get_corr_id() or "-"
        return True


def setup_logging(level: str = "INFO", *, json_output: bool = False) -> None:
    """Configure the ``querylens`` logger tree.

    Logs go to stderr so that CLI output on stdout stays machine-readable.
    """
    logger = logging.getLogger("querylens")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(corr_id)s] %(message)s")
        )
        handler.addFilter(_CorrIdFilter())
    logger.handlers[:] = [handler]
    logger.propagate = False

    # Reduce noise
    logging.getLogger("duckdb").setLevel(logging.WARNING)
