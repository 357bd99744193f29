"""Structured Logging — one JSON object per record, installed once per process.

Invariants:
    - Every record carries timestamp (the record's own creation time, UTC), level,
      logger and message
    - Only whitelisted extras are emitted: account_id, chore_id, role, error_code, path,
      client_key; anything else passed as extra (passwords, tokens) is dropped
    - setup_logging() is idempotent: our handler is replaced, never stacked

Design Decisions:
    - Stdlib logging with a custom Formatter; modules only call logging.getLogger(__name__)
    - "text" format for local development, "json" everywhere else
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = ("account_id", "chore_id", "role", "error_code", "path", "client_key")
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
HANDLER_NAME = "chore_match"


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single-line JSON document."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key))
            for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the chore_match stream handler on the root logger and return it."""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    return handler
