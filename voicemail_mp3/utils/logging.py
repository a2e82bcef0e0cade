"""Logging for a filter process run by the MTA.

Standard output may be read by the caller, so every handler writes to
standard error or to syslog. Each line carries the invocation's correlation
ID and any keyword context passed through :class:`LoggerMixin`.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from .correlation import get_correlation_id

PACKAGE_LOGGER = "voicemail_mp3"
SYSLOG_IDENT = "voicemail-mp3"

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName", "correlation_id"}


def context_of(record: logging.LogRecord) -> Dict[str, Any]:
    """Keyword context attached to ``record`` through ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES
    }


def component_of(record: logging.LogRecord) -> str:
    """Logger name without the package prefix."""
    prefix = PACKAGE_LOGGER + "."
    if record.name.startswith(prefix):
        return record.name[len(prefix) :]
    return record.name


class CorrelationFormatter(logging.Formatter):
    """Formatter that stamps every record with the invocation's correlation ID.

    ``json`` emits one object per line for log shippers. ``text`` emits a
    compact line with the context appended as ``key=value`` pairs.
    ``timestamps=False`` leaves the time out, for syslog which adds its own.
    """

    def __init__(self, format_type: str = "text", timestamps: bool = True):
        super().__init__()
        self.format_type = format_type.lower()
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id

        if self.format_type == "json":
            return self._format_json(record)
        return self._format_text(record)

    def _format_json(self, record: logging.LogRecord) -> str:
        log_data = {
            "level": record.levelname,
            "component": component_of(record),
            "message": record.getMessage(),
            "pid": record.process,
        }
        if self.timestamps:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        log_data.update(context_of(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)

    def _format_text(self, record: logging.LogRecord) -> str:
        parts = []
        if self.timestamps:
            parts.append(datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"))
        parts.append(f"{record.levelname:8s}")

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            parts.append(f"[{correlation_id}]")

        parts.append(f"{component_of(record)}: {record.getMessage()}")
        line = " ".join(parts)

        context = context_of(record)
        if context:
            line += " (" + " ".join(f"{key}={value}" for key, value in context.items()) + ")"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def _syslog_handler() -> logging.Handler:
    address = "/dev/log" if os.path.exists("/dev/log") else ("localhost", 514)
    handler = logging.handlers.SysLogHandler(
        address=address, facility=logging.handlers.SysLogHandler.LOG_MAIL
    )
    handler.ident = f"{SYSLOG_IDENT}[{os.getpid()}]: "
    return handler


def setup_logging(level: str = "INFO", format_type: str = "text", syslog: bool = False) -> None:
    """Send log records to stderr, and to the mail syslog facility if asked."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(CorrelationFormatter(format_type))
    root_logger.addHandler(handler)

    if syslog:
        handler = _syslog_handler()
        handler.setFormatter(CorrelationFormatter(format_type, timestamps=False))
        root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, level.upper()))

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerMixin:
    """Gives a class a logger and ``log_*`` helpers taking keyword context."""

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__module__ + "." + self.__class__.__name__)

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        self.logger.log(level, message, extra=context)

    def log_debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def log_info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs)

    def log_warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs)

    def log_error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, kwargs)
