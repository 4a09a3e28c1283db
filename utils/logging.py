# utils/logging.py
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional


class JsonFormatter(logging.Formatter):
    """One JSON object per line; structured fields travel in record.extra_fields."""

    def format(self, record):
        base = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            base.update(extra_fields)
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def get_logger(name: str = "tone", level: Optional[str] = None) -> logging.Logger:
    """
    Logger writing JSON lines to stdout. Handlers are attached once per name;
    the level defaults to the configured logging.level.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    if level is None:
        from config.settings import SETTINGS
        level = SETTINGS.logging.level
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(JsonFormatter())
    logger.addHandler(h)
    logger.propagate = False
    return logger
