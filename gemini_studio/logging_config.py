# gemini_studio/logging_config.py
"""
JSON-lines logging on stderr.

stdout carries the MCP stdio protocol, so nothing may log there. Call
configure_logging() before importing modules that emit at import time.
"""

import json
import logging
import sys
from datetime import datetime, timezone

_VERBOSITY_LEVELS = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}

# Libraries whose records go through our handler instead of their own
_ADOPTED_LOGGERS = ("uvicorn", "fastmcp")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg (+ exc)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(verbosity: str = "normal") -> None:
    """
    Point the root logger at a single stderr JSON handler.

    Safe to call again once config is loaded; the previous handler is replaced.

    Args:
        verbosity: "quiet", "normal" or "verbose" (unknown values mean normal)
    """
    level = _VERBOSITY_LEVELS.get(verbosity, logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _ADOPTED_LOGGERS:
        adopted = logging.getLogger(name)
        adopted.handlers[:] = [handler]
        adopted.setLevel(level)
        adopted.propagate = False

    # httpx logs every request at INFO, which floods the log with image calls
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
