"""Centralized logging for the form upload service."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from formupload.core.tracing import get_trace_id

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(trace_id)s | %(name)s | %(message)s"

# LogRecord attributes that are not user supplied `extra=` values
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "trace_id", "taskName"}


class TraceIdFilter(logging.Filter):
    """Stamp each record with the trace_id of the current request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, extras included."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": getattr(record, "trace_id", "-"),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k in _RESERVED_ATTRS or v is None:
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except (TypeError, ValueError):
                payload[k] = str(v)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    *,
    level: str = "INFO",
    format_type: str = "text",
    log_file: str | None = None,
) -> None:
    """
    Configure application logging. Call once at startup.

    Args:
        level: DEBUG, INFO, WARNING, ERROR, CRITICAL
        format_type: "text" (human-readable) or "json"
        log_file: Optional path to also write logs to
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Drop handlers left over from a previous call (uvicorn --reload)
    for h in root.handlers[:]:
        root.removeHandler(h)

    trace_filter = TraceIdFilter()
    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    console.addFilter(trace_filter)
    root.addHandler(console)

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            fh.addFilter(trace_filter)
            root.addHandler(fh)
        except OSError as e:
            root.warning("Could not create log file %s: %s", log_file, e)

    # python-multipart logs every chunk boundary at DEBUG
    logging.getLogger("python_multipart").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name. Prefer the formupload.* namespace."""
    return logging.getLogger(name)
