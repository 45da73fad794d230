# backend/app/logging_config.py
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .config import settings
from .middleware.request_id import get_request_id

# Attributes every LogRecord carries; anything else on a record came from `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {"message", "asctime"}

_SENSITIVE = ("token", "secret", "password", "authorization")


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """
    The `extra=` fields of a record (org_id, building_id, metric_type, ...),
    with credential-looking keys masked.
    """
    out: dict[str, Any] = {}
    for k, v in vars(record).items():
        if k in _RECORD_ATTRS or k.startswith("_"):
            continue
        out[k] = "[REDACTED]" if any(s in k.lower() for s in _SENSITIVE) else v
    return out


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, request_id, extras, exc_info."""

    def __init__(self, *, service: str = "facility-finance", env: Optional[str] = None) -> None:
        super().__init__()
        self.service = service
        self.env = env

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
        }
        if self.env:
            payload["env"] = self.env

        rid = get_request_id()
        if rid:
            payload["request_id"] = rid

        payload.update(record_extras(record))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Installs the JSON handler on the root logger, replacing whatever was there
    (uvicorn reload and Celery both pre-install handlers).
    """
    lvl = (level or settings.log_level or "INFO").upper()

    root = logging.getLogger()
    root.setLevel(lvl)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(lvl)
    handler.setFormatter(JsonFormatter(env=settings.app_env))
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(lvl)
    logging.getLogger("sqlalchemy.engine").setLevel((settings.sql_log_level or "WARNING").upper())
