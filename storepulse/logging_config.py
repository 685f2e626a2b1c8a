"""
Logging configuration for storepulse.

Every record is tagged with the diagnostic section that was running when it
was emitted, so a slow or crashing probe can be traced in the log file even
though the report itself only shows checks. Console output goes to stderr;
stdout carries the rendered report.
"""

import json
import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Mapping

_current_section: ContextVar[str] = ContextVar("storepulse_section", default="-")

# Loggers that are chatty at INFO and say nothing useful about the host
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "redis", "asyncio")


@contextmanager
def section_context(title: str) -> Iterator[None]:
    """Tag log records emitted inside the block with `title`."""
    token = _current_section.set(title)
    try:
        yield
    finally:
        _current_section.reset(token)


class SectionFilter(logging.Filter):
    """Adds `record.section` from the running section (or "-")."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.section = _current_section.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including the diagnostic section."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "section": getattr(record, "section", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log)


def setup_logging(
    log_level: str,
    logs_dir: str,
    json_logs: bool,
    logger_levels: Mapping[str, str] | None = None,
) -> None:
    """Configure the root logger.

    `logger_levels` raises or lowers individual loggers, e.g.
    {"storepulse.probes.http": "DEBUG"} to trace only the storefront probes.
    """
    os.makedirs(logs_dir, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)
    section_filter = SectionFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    if json_logs:
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(section)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    # 10MB per file, keep 5 backups; always JSON so runs can be compared
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, "storepulse.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonFormatter())

    for handler in (console, file_handler):
        handler.addFilter(section_filter)

    # Per-logger overrides may go below the console level; the root must let them through
    overrides = {
        name: getattr(logging, value.upper(), level)
        for name, value in (logger_levels or {}).items()
    }
    root_level = min([level, *overrides.values()])
    file_handler.setLevel(root_level)
    logging.basicConfig(level=root_level, handlers=[console, file_handler], force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if root_level < level:
        # Only the overridden loggers may log below the configured level
        logging.getLogger("storepulse").setLevel(level)
    for name, value in overrides.items():
        logging.getLogger(name).setLevel(value)
