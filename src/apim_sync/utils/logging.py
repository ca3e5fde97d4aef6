"""Logging setup for APIM Sync.

Every module logs through structlog with snake_case event names. The console
gets human-readable lines via Rich; an optional log file gets one JSON object
per line.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.typing import EventDict, WrappedLogger

from apim_sync import __version__

APP_NAME = "apim-sync"

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

# Keys are redacted when their lowercased name contains one of these
SENSITIVE_FIELDS = (
    "token",
    "secret",
    "password",
    "authorization",
    "subscription-key",
    "subscription_key",
    "api_key",
)

REDACTED = "[REDACTED]"


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["app"] = APP_NAME
    event_dict["version"] = __version__
    return event_dict


class JSONFileFormatter(logging.Formatter):
    """Write records as JSON lines.

    Messages arrive already rendered by structlog, so colour codes are stripped
    before the line is serialised.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": _ANSI_PATTERN.sub("", record.getMessage()),
            "app": APP_NAME,
            "version": __version__,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)


def _level(name: str | None, default: int) -> int:
    return getattr(logging, name.upper(), default) if name else default


def configure_logging(
    level: str = "WARNING",
    log_format: str = "json",
    log_file: str | None = None,
    file_level: str | None = None,
) -> None:
    """Configure structlog and the root logger handlers.

    Args:
        level: Console log level
        log_format: Log file format, ``json`` or ``console``
        log_file: Optional log file path; parent directories are created
        file_level: Log file level (defaults to DEBUG)
    """
    console_level = _level(level, logging.WARNING)
    file_log_level = _level(file_level, logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(console_level)
    root_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(path)
        file_handler.setLevel(file_log_level)
        file_handler.setFormatter(
            JSONFileFormatter() if log_format == "json" else logging.Formatter("%(message)s")
        )
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            min(console_level, file_log_level) if log_file else console_level
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_api_request(
    logger: structlog.stdlib.BoundLogger,
    method: str,
    url: str,
    status_code: int,
    duration_ms: float,
    **extra: Any,
) -> None:
    """Log a completed platform request.

    Successful calls and 404s are debug output: most 404s come from APIs
    without a schema. Other client errors are warnings and server errors are
    errors.
    """
    fields = {
        "method": method,
        "url": url,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
        **extra,
    }

    if status_code < 400 or status_code == 404:
        logger.debug("platform_request", **fields)
    elif status_code < 500:
        logger.warning("platform_request_rejected", **fields)
    else:
        logger.error("platform_request_failed", **fields)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    context: str,
    **extra: Any,
) -> None:
    """Log an exception that ended a pipeline step."""
    logger.error(
        f"{context}_failed",
        error_type=type(error).__name__,
        error=str(error),
        **extra,
    )


def sanitize_payload(payload: Any, max_depth: int = 10) -> Any:
    """Return a copy of ``payload`` with credential values replaced by ``[REDACTED]``."""
    if max_depth <= 0:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(payload, dict):
        return {
            key: REDACTED
            if any(field in str(key).lower() for field in SENSITIVE_FIELDS)
            else sanitize_payload(value, max_depth - 1)
            for key, value in payload.items()
        }

    if isinstance(payload, list):
        return [sanitize_payload(item, max_depth - 1) for item in payload]

    return payload


def truncate_payload(payload: Any, max_size: int = 10000) -> str:
    """Serialise ``payload`` for a log line, cut to ``max_size`` characters."""
    try:
        text = json.dumps(payload, indent=2, default=str)
    except (TypeError, ValueError):
        text = str(payload)

    if len(text) > max_size:
        return f"{text[:max_size]}\n... [TRUNCATED - {len(text)} total chars]"

    return text
