# File: tankscape_relay/data/alert_log.py
import os
import logging
import threading
import traceback
from typing import Any, Dict, Optional, TextIO

from utils.helpers import to_json, utc_now_iso

logger = logging.getLogger(__name__)


class AlertLogWriter:
    """
    Append-only alert log. Each record is written as
    `[<ISO timestamp>] <indented JSON>` followed by a newline.

    Use it as a context manager (or call open/close) so the file handle is
    acquired once per process and flushed on release. Every write is flushed
    before it returns; failures are logged and reported via the return value.
    """
    def __init__(self, path: str):
        self.path = path
        self._file: Optional[TextIO] = None
        self._lock = threading.Lock()

    def open(self) -> "AlertLogWriter":
        if self._file is None:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            self._file = open(self.path, 'a', encoding='utf-8')
            logger.info(f"Alert log opened at {self.path}")
        return self

    def close(self):
        if self._file is None:
            return
        try:
            self._file.flush()
        except OSError as e:
            logger.error(f"Error flushing alert log {self.path}: {e}")
        finally:
            self._file.close()
            self._file = None

    def __enter__(self) -> "AlertLogWriter":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._file is None

    def write(self, record: Dict[str, Any]) -> bool:
        """Appends one record. Returns False (and logs) if it could not be written."""
        if self._file is None:
            logger.error(f"Alert log {self.path} is not open. Record dropped: {record.get('event')}")
            return False
        entry = f"[{utc_now_iso()}] {to_json(record, indent=2)}\n"
        with self._lock:
            try:
                self._file.write(entry)
                self._file.flush()
                return True
            except (OSError, ValueError) as e:
                logger.error(f"Error writing to alert log {self.path}: {e}")
                return False

    def write_error(self, event: str, error: BaseException, include_stack: bool = True) -> bool:
        record = {
            "event": event,
            "timestamp": utc_now_iso(),
            "error": str(error),
        }
        if include_stack:
            record["stack"] = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return self.write(record)


def append_record(path: str, record: Dict[str, Any]) -> bool:
    """Opens the log, appends a single record and closes it again."""
    try:
        with AlertLogWriter(path) as writer:
            return writer.write(record)
    except OSError as e:
        logger.error(f"Could not open alert log {path}: {e}")
        return False
