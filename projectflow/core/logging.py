"""
Logging for the ProjectFlow API.

Everything goes to stdout through ProjectFlowFormatter: one JSON object
per line in production, one readable line elsewhere. Records pick up the
request_id that RequestIdMiddleware binds for the current request, and
log_event attaches project/user context plus a truncated `details` map.
"""

import json
import logging
import os
import sys
from bisect import bisect_right
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

LOGGER_NAME = "projectflow"

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Upper edges in ms; labels has one more entry for everything above.
_LATENCY_EDGES = (10, 100, 500, 1000)
_LATENCY_LABELS = ("<10ms", "10-100ms", "100-500ms", "500-1000ms", ">=1000ms")

CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "project_id",
    "event_type",
    "error_code",
    "method",
    "path",
    "status",
    "latency_bucket",
)


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    rid = request_id_ctx_var.get()
    return default if rid is None else rid


def request_id_for(request) -> Optional[str]:
    """request_id set by RequestIdMiddleware, else the context value."""
    return getattr(request.state, "request_id", None) or get_request_id()


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return "unknown"
    return _LATENCY_LABELS[bisect_right(_LATENCY_EDGES, latency_ms)]


def truncate(value: Any, limit: int = 500) -> str:
    try:
        text = str(value)
    except Exception:
        return "<unserializable>"
    return text if len(text) <= limit else f"{text[:limit]}...<truncated>"


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_ctx_var.get()
        return True


class ProjectFlowFormatter(logging.Formatter):
    def __init__(self, as_json: bool = False):
        super().__init__()
        self.as_json = as_json

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        context = {name: getattr(record, name) for name in CONTEXT_FIELDS if getattr(record, name, None) is not None}
        details = getattr(record, "details", None)

        if self.as_json:
            entry: Dict[str, Any] = {
                "timestamp": stamp,
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
                **context,
            }
            if details:
                entry["details"] = details
            if record.exc_info:
                entry["exc_info"] = self.formatException(record.exc_info)
            return json.dumps(entry, default=str)

        pairs = [f"{k}={v}" for k, v in context.items()]
        pairs.extend(f"{k}={v}" for k, v in (details or {}).items())
        line = f"{stamp} {record.levelname:<7} {record.getMessage()}"
        if pairs:
            line = f"{line} | {' '.join(pairs)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(env: str = "development") -> None:
    """Send the projectflow logger to stdout; JSON when env is production."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProjectFlowFormatter(as_json=env.lower() == "production"))
    handler.addFilter(ContextFilter())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.handlers = [handler]
    logger.propagate = True

    for noisy in ("uvicorn", "uvicorn.error"):
        logging.getLogger(noisy).propagate = False


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    project_id: Optional[str] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """
    Log ``msg`` on the projectflow logger with request/user/project context.

    Values in ``extra`` are stringified and truncated into the record's
    ``details`` map.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    fields = {
        "request_id": request_id or get_request_id(),
        "user_id": user_id,
        "project_id": project_id,
        "event_type": event_type,
        "error_code": error_code,
        "details": {key: truncate(value) for key, value in (extra or {}).items()},
    }
    getattr(logger, level, logger.info)(msg, extra=fields)
