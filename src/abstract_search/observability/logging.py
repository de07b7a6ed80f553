"""Log setup for the CLI: plain text for humans, one JSON object per line for machines.

JSON lines carry the correlation ids published by ``create_span`` so a slow
query or a broken build can be traced back from the logs alone.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from abstract_search.observability.context import get_trace_context


_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class JsonFormatter(logging.Formatter):
    """Render records as compact JSON with trace correlation.

    Anything passed through ``extra=`` becomes a top-level key. Long string
    values (queries, abstracts) are clipped so one pathological record cannot
    flood the log.
    """

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_trace_context()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ctx.get("trace_id", ""),
            "span_id": ctx.get("span_id", ""),
        }
        if ctx.get("operation"):
            entry["operation"] = ctx["operation"]
        if "." in record.name:
            entry["component"] = record.name.rsplit(".", 1)[-1]
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            entry[key] = _clip(value, self.MAX_FIELD_LEN) if isinstance(value, str) else value

        return orjson.dumps(entry, default=_encode_extra).decode("utf-8")


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _encode_extra(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _resolve_level(name: str) -> int:
    upper = name.strip().upper()
    return logging.getLevelName(upper) if upper in _LEVELS else logging.INFO


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Point the root logger at a single stderr handler.

    stdout is reserved for query results, so logs never interleave with them.

    Args:
        level: Root level name (debug, info, warning, error, critical).
        json_output: Use :class:`JsonFormatter` instead of the text format.
        logger_levels: Per-logger overrides, e.g. ``{"abstract_search.feed": "debug"}``.
    """
    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))

    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_resolve_level(name_level))
