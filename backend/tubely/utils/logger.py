"""
Structured logging for Tubely.

Every record is written as one JSON object per line (or as plain text for
local development). Upload pipeline records carry the video, the user and the
pipeline stage; those are lifted to top-level keys so log queries can filter
on them directly, and any other ``extra`` values are nested under ``"extra"``.

Usage:
    from tubely.utils.logger import add_log_context, setup_logging

    setup_logging(log_level="INFO", json_logs=True)

    logger = logging.getLogger(__name__)
    ctx_logger = add_log_context(logger, video_id="abc123", user_id="user456")
    ctx_logger.info("Staged upload", extra={"stage": "staged"})
"""

import json
import logging
import sys

from datetime import datetime, timezone
from typing import Any


# =============================================================================
# Constants
# =============================================================================

# Context keys promoted to top-level fields of a JSON record
PIPELINE_FIELDS: tuple[str, ...] = ("video_id", "user_id", "stage")

# Chatty libraries held at third_party_level
QUIET_LOGGERS: tuple[str, ...] = (
    "asyncio",
    "boto3",
    "botocore",
    "s3transfer",
    "urllib3",
    "motor",
    "pymongo",
    "multipart",
    "python_multipart",
    "httpx",
    "httpcore",
)

TEXT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes present on every LogRecord; anything else arrived through extra
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "color_message"}


# =============================================================================
# Formatter
# =============================================================================


class JSONFormatter(logging.Formatter):
    """
    Render a record as a single-line JSON object.

    Example output:
        {"timestamp":"2025-01-15T10:30:45.123456+00:00","level":"WARNING",
         "logger":"tubely.services.upload_service",
         "message":"Video upload failed after stage 'classified': ...",
         "video_id":"1c5a...","user_id":"0b8a...","stage":"classified",
         "extra":{"reason":"remux-failed"}}
    """

    def __init__(self, with_source: bool = False) -> None:
        super().__init__()
        self.with_source = with_source

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.with_source:
            entry["source"] = f"{record.pathname}:{record.lineno} in {record.funcName}"

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        for field in PIPELINE_FIELDS:
            if field in extra:
                entry[field] = extra.pop(field)
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str, ensure_ascii=False, separators=(",", ":"))


# =============================================================================
# Setup
# =============================================================================


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    third_party_level: str = "WARNING",
) -> None:
    """
    Configure the root logger and route Uvicorn's loggers through it.

    Called once from the application lifespan. Existing root handlers are
    replaced, so calling it again reconfigures rather than duplicates output.

    Args:
        log_level: Application log level name, case-insensitive.
        json_logs: JSON lines when True, plain text otherwise.
        third_party_level: Level applied to QUIET_LOGGERS.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if json_logs:
        formatter: logging.Formatter = JSONFormatter(with_source=level <= logging.DEBUG)
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Uvicorn installs its own handlers; drop them so records reach the root once
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    quiet_level = logging.getLevelName(third_party_level.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level if isinstance(quiet_level, int) else logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, json=%s", logging.getLevelName(level), json_logs
    )


# =============================================================================
# Context
# =============================================================================


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter whose context is merged into, not substituted for, a call's extra."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def add_log_context(logger: logging.Logger, **context: Any) -> ContextLoggerAdapter:
    """
    Wrap ``logger`` so every record carries ``context``.

    Example:
        ctx_logger = add_log_context(logger, video_id="abc-123", user_id="user-456")
        ctx_logger.warning("Probe failed", extra={"stage": "staged"})
    """
    return ContextLoggerAdapter(logger, context)


__all__ = [
    "JSONFormatter",
    "ContextLoggerAdapter",
    "setup_logging",
    "add_log_context",
]
