"""
Operator Event Log
==================

Append-only record of notable operator events (selection, sync, alert
attempts) shown in the console footer. Every entry is mirrored to the
AMHUB logger.
"""

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("AMHUB.EventLog")


class LogType(Enum):
    INFO = "info"
    REQUEST = "request"
    SUCCESS = "success"
    ERROR = "error"


_PYTHON_LEVELS = {
    LogType.INFO: logging.INFO,
    LogType.REQUEST: logging.INFO,
    LogType.SUCCESS: logging.INFO,
    LogType.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    id: int
    timestamp: datetime
    type: LogType
    message: str
    details: Optional[Any] = None

    def to_row(self) -> Dict[str, Any]:
        """Row for ui.get_log_html."""
        return {
            "level": self.type.value,
            "message": self.message,
            "time": self.timestamp.strftime("%H:%M:%S"),
        }


class EventLog:
    """Append-only; entries are never edited or removed."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._entries: List[LogEntry] = []
        self._ids = itertools.count(1)
        self._clock = clock

    def add(self, type: LogType, message: str, details: Any = None) -> LogEntry:
        entry = LogEntry(
            id=next(self._ids),
            timestamp=self._clock(),
            type=type,
            message=message,
            details=details,
        )
        self._entries.append(entry)
        logger.log(_PYTHON_LEVELS[type], f"[{type.value}] {message}")
        return entry

    def info(self, message: str, details: Any = None) -> LogEntry:
        return self.add(LogType.INFO, message, details)

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def tail(self, count: int) -> Tuple[LogEntry, ...]:
        return tuple(self._entries[-count:]) if count > 0 else ()

    def __len__(self) -> int:
        return len(self._entries)
