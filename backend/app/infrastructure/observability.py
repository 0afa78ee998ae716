"""Structured Logging — one JSON object per line, carrying like/match context.

Invariants:
    - Every record has ts, level, logger, message and the service name
    - Context passed through `extra=` (user_id, target_id, edge_id, event_kind,
      error_code, path) is emitted only when set
    - setup_logging replaces its own handler on repeat calls, never stacks
    - Chatty library loggers (httpx, uvicorn.access) capped at WARNING

Design Decisions:
    - stdlib logging + a Formatter subclass: no extra dependency
    - `text` format for local runs and tests, `json` for deployed containers
"""

import json
import logging
from datetime import datetime, timezone

SERVICE = "likes-api"

CONTEXT_FIELDS = (
    "user_id", "target_id", "edge_id", "event_kind", "error_code", "path",
)

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_HANDLER_NAME = "likes-service"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: getattr(record, key)
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info:
            entry["exc_type"] = record.exc_info[0].__name__
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s")
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
