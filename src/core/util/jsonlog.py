"""
Structured logging helpers.

Каждое событие логируется одной строкой JSON: удобно для grep и для
последующего разбора логов сессии.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict


def utc_iso(ts: datetime | None = None) -> str:
    """UTC timestamp с точностью до секунды: 2025-01-31T12:00:00Z."""
    ts = ts or datetime.now(timezone.utc)
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    ts = ts.replace(microsecond=0)
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def log_json(logger: logging.Logger, payload: Dict[str, Any], level: int = logging.INFO) -> None:
    """Логирование payload компактной JSON-строкой."""
    if not logger.isEnabledFor(level):
        return
    logger.log(level, json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str))
