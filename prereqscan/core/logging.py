"""
Structured logging configuration.

Library code only asks for loggers under the ``prereqscan`` hierarchy;
handlers are installed by the command line interface through
:func:`setup_logging`.  Per-file context (``file``, ``errors``...) travels
on records as ``extra_data`` and is rendered by both formatters.
"""

import sys
import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import json
from pathlib import Path

from .config import ScannerSettings, get_settings

PACKAGE_LOGGER = "prereqscan"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        log_data.update(getattr(record, "extra_data", {}))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """
    Compact text for a terminal.

    Context fields follow the message as ``key=value`` pairs.
    """

    def __init__(self):
        super().__init__(fmt="%(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = getattr(record, "extra_data", None)
        if extra:
            line += " " + " ".join(f"{key}={value}" for key, value in extra.items())
        return line


def setup_logging(settings: Optional[ScannerSettings] = None, level: Optional[str] = None) -> None:
    """
    Install handlers on the package logger.

    ``level`` overrides ``LOG_LEVEL`` (the CLI derives it from -v/-q).
    Calling this again replaces the previous handlers.
    """
    settings = settings or get_settings()
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.WARNING)
    formatter = StructuredFormatter() if settings.LOG_FORMAT == "json" else TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in logger.handlers:
        old.close()
    logger.handlers = handlers
    logger.setLevel(log_level)
    logger.propagate = False


class ScanLogAdapter(logging.LoggerAdapter):
    """Logger carrying fixed context merged into every record's ``extra_data``"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra_data = kwargs.pop("extra_data", {})
        kwargs.setdefault("extra", {})["extra_data"] = {**self.extra, **extra_data}
        return msg, kwargs


def get_context_logger(name: str, **context) -> ScanLogAdapter:
    """Get a logger that adds ``context`` to everything it logs"""
    return ScanLogAdapter(logging.getLogger(name), context)
