"""
Structured JSON logging.
Outputs JSON lines in production, human-readable in development.
Logs go to stderr so command output on stdout stays pipeable.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

import json_log_formatter


class JsonFormatter(json_log_formatter.JSONFormatter):
    """JSON line per record with level, logger name and any `extra` fields."""

    def json_record(
        self, message: str, extra: dict[str, Any], record: logging.LogRecord
    ) -> dict[str, Any]:
        extra["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        extra["level"] = record.levelname
        extra["logger"] = record.name
        extra["message"] = message
        if record.exc_info:
            extra["exception"] = self.formatException(record.exc_info)
        return extra


def setup_logging(level: Optional[str] = None) -> None:
    from tracklink.config.settings import settings

    level = level or settings.LOG_LEVEL
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)

    if settings.is_production:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Quiet noisy libraries
    for lib in ("aiohttp", "dbus_next", "asyncio"):
        logging.getLogger(lib).setLevel(logging.WARNING)
