# File: utils/helpers.py
import logging
import datetime
import json
from typing import Any, Optional


def setup_main_logging(level: Optional[str] = None):
    """Sets up basic root logging configuration."""
    if level is None:
        from config import settings
        level = settings.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def utc_now_iso() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a 'Z' suffix."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


def to_json(data: Any, indent: Optional[int] = None) -> str:
    return json.dumps(data, indent=indent)
