"""
Value types stored in the histories and returned by the query facade.
"""
import time
from dataclasses import dataclass
from typing import Tuple


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class LogEntry:
    message: str
    timestamp: int


@dataclass(frozen=True)
class ErrorEntry(LogEntry):
    stack: Tuple[str, ...]
    error_id: str
    frame_hash: str
    source_file: str


@dataclass(frozen=True)
class TabInfo:
    """A tab reported by the /json/list endpoint."""
    id: str
    title: str
    url: str

    @classmethod
    def from_json(cls, record: dict) -> "TabInfo":
        return cls(
            id=str(record.get('id', '')),
            title=str(record.get('title', '')),
            url=str(record.get('url', '')),
        )
