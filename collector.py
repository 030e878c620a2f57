"""
Query surface over the session and the two histories: list tabs, connect,
read the current tab and page through logs and errors oldest-first.
"""
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .config import CollectorConfig
from .connection import CDPConnection
from .entries import ErrorEntry, LogEntry, TabInfo
from .history import BoundedHistory
from .normalizer import EventNormalizer
from .session import SessionManager


def _chronological(history: BoundedHistory, count: int, start: int) -> list:
    """
    Items [start, start + count) of the history counted from the oldest entry,
    returned oldest-first. The history itself is stored newest-first.
    """
    items = history.snapshot()
    items.reverse()
    start = max(start, 0)
    count = max(count, 0)
    return items[start:start + count]


class LogCollector:
    """Owns the histories and the session for one collector process."""

    def __init__(self, config: Optional[CollectorConfig] = None,
                 connection_factory: Optional[Callable[[], CDPConnection]] = None):
        self.config = config or CollectorConfig.from_env()
        self.logs: BoundedHistory[LogEntry] = BoundedHistory(self.config.log_limit)
        self.errors: BoundedHistory[ErrorEntry] = BoundedHistory(self.config.error_limit)
        self.normalizer = EventNormalizer(self.logs, self.errors, self.config.ignored_patterns)
        self.session = SessionManager(self.config, self.normalizer, connection_factory)

    async def list_tabs(self) -> List[TabInfo]:
        return await self.session.list_tabs()

    async def connect(self, title: str):
        await self.session.start(title)

    def current_tab(self) -> Optional[str]:
        return self.session.current_tab_title

    def get_logs(self, count: int = 10, start: int = 0) -> List[LogEntry]:
        return _chronological(self.logs, count, start)

    def get_errors(self, count: int = 10, start: int = 0) -> List[ErrorEntry]:
        return _chronological(self.errors, count, start)

    def clear(self):
        self.logs.clear()
        self.errors.clear()

    async def close(self):
        await self.session.stop()


def format_timestamp(timestamp: int) -> str:
    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_tabs(tabs: List[TabInfo]) -> str:
    if not tabs:
        return "No open tabs found."
    lines = [f"[{tab.id}]\n  Title: {tab.title}\n  URL: {tab.url}" for tab in tabs]
    return f"Found {len(tabs)} tab(s):\n\n" + "\n\n".join(lines)


def format_current_tab(title: Optional[str]) -> str:
    if title:
        return f'Currently connected to tab: "{title}"'
    return "No tab is currently connected."


def format_logs(logs: List[LogEntry], count: int) -> str:
    header = f"Logs ({len(logs)} of {count} requested):"
    lines = [f"[{format_timestamp(log.timestamp)}] {log.message}" for log in logs]
    return "\n\n".join([header, "\n".join(lines)]) if lines else header


def format_errors(errors: List[ErrorEntry], count: int) -> str:
    header = f"Errors ({len(errors)} of {count} requested):"
    blocks = []
    for err in errors:
        blocks.append("\n".join([
            f"time: {format_timestamp(err.timestamp)}",
            f"errorId: {err.error_id}",
            f"sourceFile: {err.source_file}",
            f"frameHash: {err.frame_hash}",
            f"message: {err.message}",
            "stack:\n" + "\n".join(err.stack),
            "---",
        ]))
    return "\n\n".join([header] + blocks)
