"""Structured Logging: one JSON line per record, shaped around tool calls and usage.

Invariants:
    - Every line carries timestamp, level, logger name, and message
    - Call identity (tool_name, call_id, thread, model, attempt, error_code)
      is emitted flat when present
    - Usage counters (input_tokens, output_tokens, requests) are grouped under
      "usage", matching the Usage wire shape
    - An AgentWireError in exc_info is emitted as its to_dict() under "error"
    - setup_logging is idempotent: a second call replaces the handler it installed
"""

import json
import logging
from datetime import datetime, timezone

from agentwire.config import Settings, get_settings
from agentwire.core.errors import AgentWireError

CALL_FIELDS = ("tool_name", "call_id", "thread", "model", "attempt", "error_code")
USAGE_FIELDS = ("input_tokens", "output_tokens", "requests")

_installed: logging.Handler | None = None


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CALL_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        usage = {
            key: record.__dict__[key]
            for key in USAGE_FIELDS
            if record.__dict__.get(key) is not None
        }
        if usage:
            log["usage"] = usage
        if record.exc_info:
            exc = record.exc_info[1]
            if isinstance(exc, AgentWireError):
                log["error"] = exc.to_dict()
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install one stream handler on the root logger. Returns the handler."""
    global _installed
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    if _installed is not None:
        logging.root.removeHandler(_installed)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _installed = handler
    return handler


def setup_logging_from_settings(settings: Settings | None = None) -> logging.Handler:
    """Configure logging from AGENTWIRE_LOG_LEVEL / AGENTWIRE_LOG_FORMAT."""
    settings = settings or get_settings()
    return setup_logging(settings.log_level, settings.log_format)
