"""Audit trail for the endpoint proxy.

Every record is a single JSON line on stdout, plus AUDIT_LOG_FILE when
set, tagged with the id of the proxied request it belongs to. Structured
fields ride on ``extra={"audit_data": ...}``; any field that could carry
an upstream credential is masked before it is serialized.
"""

import json
import logging
import re
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from endpoint_proxy.config.settings import get_settings

LOGGER_NAME = "proxy.audit"

MASK = "***"
SECRET_FIELDS = frozenset({"api_key", "apikey", "authorization", "x-api-key", "token"})

# Caller-supplied X-Request-Id values are kept only when they look like an id
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def mask_secrets(fields: dict) -> dict:
    return {
        key: MASK if value and key.lower() in SECRET_FIELDS else value
        for key, value in fields.items()
    }


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": request_id_var.get(),
            "message": record.getMessage(),
        }
        entry.update(mask_secrets(getattr(record, "audit_data", {})))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging() -> logging.Logger:
    """(Re)configure the audit logger from settings and return it."""
    settings = get_settings()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.audit_log_file:
        handlers.append(logging.FileHandler(settings.audit_log_file))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()
    formatter = JSONFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    # Audit lines are already complete JSON; the root logger would duplicate them
    logger.propagate = False
    return logger


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def audit(message: str, level: int = logging.INFO, **fields) -> None:
    """Emit one audit record with structured fields."""
    get_audit_logger().log(level, message, extra={"audit_data": fields})


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request_id(incoming: str | None = None) -> str:
    """Set the request id for the current context.

    A well-formed caller-supplied id is reused so logs can be joined with
    the caller's own; anything else gets a fresh id.
    """
    if incoming and _REQUEST_ID_PATTERN.fullmatch(incoming):
        rid = incoming
    else:
        rid = generate_request_id()
    request_id_var.set(rid)
    return rid


class RequestTimer:
    """Measures the wall-clock time of a block in milliseconds."""

    elapsed_ms: float = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc):
        self.elapsed_ms = round((time.perf_counter() - self._started) * 1000, 2)
        return False
