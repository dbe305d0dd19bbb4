import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from update_center.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 10

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(log_file: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Route the root logger (and uvicorn's) to stdout and an optional rotating file.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than stacked.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    handlers = []

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers.append(console)

    path = settings.LOG_FILE if log_file is None else log_file
    if path:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        rotating = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
        rotating.setFormatter(formatter)
        handlers.append(rotating)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_update_center", False):
            root.removeHandler(handler)
    for handler in handlers:
        handler._update_center = True
        root.addHandler(handler)
    root.setLevel((level or settings.LOG_LEVEL).upper())

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [console]
        uvicorn_logger.propagate = False

    return root


class JsonLogger:
    """Structured one-line JSON records on the ``json_logger`` logger"""

    _logger = logging.getLogger("json_logger")

    @staticmethod
    def log_event(event_type: str, data: Dict[str, Any], level: str = "info"):
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "level": level,
            "data": data,
        }
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO
        JsonLogger._logger.log(numeric_level, json.dumps(record, default=str, ensure_ascii=False))

    @staticmethod
    def log_audit(action: str, user: str, resource: str, details: Dict[str, Any]):
        """Who changed which catalog resource"""
        JsonLogger.log_event(
            "audit",
            {"action": action, "user": user, "resource": resource, "details": details},
        )
