"""Central logging utilities for the schedule pipeline.

- One place to configure logging for the CLI, scripts and the scraper.
- Colored human-readable console output (default) or one JSON object per line
  (LOG_FORMAT=json) for log shippers.
- Environment variables:
    LOG_LEVEL=INFO|DEBUG|... (default: INFO, or the level passed by the caller)
    LOG_FORMAT=console|json (default: console)
    LOG_NO_COLOR=1 disables color output on the console format.
    LOG_TIMEZONE=utc|local (default: local)

Usage:
    from olympics_schedule.common.logging_utils import configure_logging, get_logger
    configure_logging(service="schedule")  # idempotent
    logger = get_logger(__name__)

Repeated configure_logging() calls are no-ops unless `force=True` is passed.
"""
from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_CONFIG_LOCK = threading.Lock()
_ALREADY_CONFIGURED = False

# Attributes every LogRecord carries; anything else was passed through `extra=`
_RESERVED_ATTRS = frozenset(
    {
        "args", "name", "msg", "levelno", "levelname", "pathname", "filename", "module",
        "exc_info", "exc_text", "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "stack_info", "taskName", "message",
    }
)

# Chatty libraries that should not flood INFO output
_NOISY_LOGGERS = ("asyncio", "playwright")


def _record_time(record: logging.LogRecord, tz_local: bool) -> datetime:
    ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return ts.astimezone() if tz_local else ts


class ColorFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\x1b[38;5;245m",  # grey
        "INFO": "\x1b[38;5;39m",  # blue
        "WARNING": "\x1b[38;5;214m",  # orange
        "ERROR": "\x1b[38;5;196m",  # red
        "CRITICAL": "\x1b[48;5;196m\x1b[38;5;231m",  # white on red
    }
    RESET = "\x1b[0m"

    def __init__(self, tz_local: bool):
        super().__init__()
        self.tz_local = tz_local

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        ts_str = _record_time(record, self.tz_local).strftime("%Y-%m-%d %H:%M:%S")
        base = f"{ts_str} | {record.levelname:<8} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        color = self.COLORS.get(record.levelname)
        return f"{color}{base}{self.RESET}" if color else base


class JsonFormatter(logging.Formatter):
    def __init__(self, tz_local: bool):
        super().__init__()
        self.tz_local = tz_local

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": _record_time(record, self.tz_local).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):
                payload[key] = repr(value)
        return json.dumps(payload, ensure_ascii=False)


def _build_formatter(log_format: str, tz_local: bool, no_color: bool) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(tz_local=tz_local)
    if sys.stderr.isatty() and not no_color:
        return ColorFormatter(tz_local=tz_local)
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_logging(service: str | None = None, *, level: str | None = None, force: bool = False) -> None:
    """Configure root logging once.

    Parameters
    ----------
    service: Optional logical service name, attached to every record as `service`.
    level: Fallback level when LOG_LEVEL is not set (e.g. Settings.log_level).
    force: If True, reconfigure even if already configured.
    """
    global _ALREADY_CONFIGURED
    with _CONFIG_LOCK:
        if _ALREADY_CONFIGURED and not force:
            return

        log_level = os.getenv("LOG_LEVEL", level or "INFO").upper()
        log_format = os.getenv("LOG_FORMAT", "console").lower()
        tz_local = os.getenv("LOG_TIMEZONE", "local").lower() != "utc"
        no_color = os.getenv("LOG_NO_COLOR") == "1"

        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)

        handler = logging.StreamHandler()
        handler.setFormatter(_build_formatter(log_format, tz_local, no_color))
        root.addHandler(handler)
        root.setLevel(getattr(logging, log_level, logging.INFO))

        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        _ServiceLoggerAdapter.BASE_SERVICE = service
        _ALREADY_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    base = logging.getLogger(name)
    if _ServiceLoggerAdapter.BASE_SERVICE:
        return _ServiceLoggerAdapter(base, {"service": _ServiceLoggerAdapter.BASE_SERVICE})  # type: ignore[return-value]
    return base


class _ServiceLoggerAdapter(logging.LoggerAdapter):
    # Set by configure_logging when a service name is given
    BASE_SERVICE: Optional[str] = None

    def process(self, msg: Any, kwargs: Dict[str, Any]):  # noqa: D401
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("service", self.extra.get("service"))
        kwargs["extra"] = extra
        return msg, kwargs


__all__ = [
    "configure_logging",
    "get_logger",
]
