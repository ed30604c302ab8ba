"""Structured logging for the viewer and the API.

Every record passes through two filters before it is formatted: one stamps
the current correlation id (set per API request by middleware), the other
masks configured secrets such as the Socrata app token. Fetch-related
extras (mode, where, generation, row_count, duration_ms) are rendered by
both the JSON and the text formatter.

    logger.info("Fetched %d violations", n, extra={"where": where, "row_count": n})
"""

import json
import logging
from collections.abc import Iterable
from contextvars import ContextVar
from datetime import datetime, timezone

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Fields accepted via logger.info("msg", extra={...})
EXTRA_FIELDS = ("mode", "where", "generation", "row_count", "duration_ms")

REDACTED = "***"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_correlation_id() -> str:
    """Return the current correlation ID, or empty string if not set."""
    return correlation_id.get()


def _extras(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in EXTRA_FIELDS if getattr(record, key, None) is not None}


class CorrelationIdFilter(logging.Filter):
    """Copy the ContextVar correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get()
        return True


class RedactSecretsFilter(logging.Filter):
    """Replace any configured secret in the rendered message with '***'.

    The message is rendered once here and the args dropped, so formatters
    downstream only ever see the masked text.
    """

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self.secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        for secret in self.secrets:
            message = message.replace(secret, REDACTED)
        record.msg = message
        record.args = None
        if isinstance(getattr(record, "where", None), str):
            for secret in self.secrets:
                record.where = record.where.replace(secret, REDACTED)
        return True


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        cid = getattr(record, "correlation_id", None) or correlation_id.get()
        if cid:
            log_entry["correlation_id"] = cid

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry.update(_extras(record))
        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for local runs: extras appended as key=value."""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [f"{key}={value}" for key, value in _extras(record).items()]
        cid = getattr(record, "correlation_id", "")
        if cid:
            pairs.insert(0, f"cid={cid}")
        if not pairs:
            return line
        # Keep a trailing traceback on its own lines
        head, sep, tail = line.partition("\n")
        return f"{head} ({' '.join(pairs)}){sep}{tail}"


def setup_logging(json_format: bool = True, level: str = "INFO", secrets: Iterable[str] = ()) -> None:
    """Configure the root logger.

    Args:
        json_format: True for JSON (API), False for text (CLI).
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
        secrets: Values to mask in every message, e.g. the app token.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.addFilter(RedactSecretsFilter(secrets))
    handler.setFormatter(JSONFormatter() if json_format else TextFormatter())
    root.addHandler(handler)

    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
