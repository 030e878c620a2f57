"""
Turns raw CDP console, exception and log events into LogEntry / ErrorEntry
records and pushes them into the matching history.
"""
import json
import logging
from typing import Any, Iterable, Optional, Union

from .entries import ErrorEntry, LogEntry, now_millis
from .history import BoundedHistory
from .stack import IGNORED_STACK_PATTERNS, fingerprint, format_stack, top_frame_url

logger = logging.getLogger("consoletap.normalizer")

ERROR_LEVELS = {'error', 'warning'}


def render_value(value: Any) -> str:
    """Stringify a RemoteObject value the way the browser console joins arguments."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(',', ':'), ensure_ascii=False)
    return str(value)


def render_arg(arg: dict) -> str:
    if not isinstance(arg, dict):
        return render_value(arg)
    if 'value' in arg:
        return render_value(arg['value'])
    return str(arg.get('unserializableValue') or arg.get('description') or '')


class EventNormalizer:
    """One handler per upstream event; each produces at most one record."""

    def __init__(self, logs: BoundedHistory, errors: BoundedHistory,
                 ignored_patterns: Iterable[str] = IGNORED_STACK_PATTERNS):
        self.logs = logs
        self.errors = errors
        self.ignored_patterns = tuple(ignored_patterns)

    def handle_console_api(self, event: dict) -> Optional[Union[LogEntry, ErrorEntry]]:
        # Runtime.consoleAPICalled
        message = ' '.join(render_arg(arg) for arg in event.get('args') or [])
        if event.get('type') in ERROR_LEVELS:
            return self.add_error(message, event.get('stackTrace'))
        return self.add_log(message)

    def handle_exception(self, event: dict) -> ErrorEntry:
        # Runtime.exceptionThrown
        details = event.get('exceptionDetails') or {}
        message = f"[EXCEPTION] {details.get('text', '')}"
        return self.add_error(message, details.get('stackTrace'))

    def handle_log_entry(self, event: dict) -> Optional[Union[LogEntry, ErrorEntry]]:
        # Log.entryAdded
        entry = event.get('entry') or {}
        level = entry.get('level', '')
        message = f"[LOG][{level}] {entry.get('source', '')}: {entry.get('text', '')}"
        if level in ERROR_LEVELS:
            return self.add_error(message, entry.get('stackTrace'))
        return self.add_log(message)

    def add_log(self, message: str) -> LogEntry:
        record = LogEntry(message=message, timestamp=now_millis())
        logger.debug(f"console {message}")
        self.logs.push_front(record)
        return record

    def add_error(self, message: str, stack_trace: Optional[dict]) -> ErrorEntry:
        stack = format_stack(stack_trace, self.ignored_patterns)
        top_frame = stack[0] if stack else ''
        record = ErrorEntry(
            message=message,
            timestamp=now_millis(),
            stack=tuple(stack),
            error_id=fingerprint(message + top_frame),
            frame_hash=fingerprint(top_frame),
            source_file=top_frame_url(stack_trace, self.ignored_patterns),
        )
        logger.debug(f"error {record.error_id} {message}")
        self.errors.push_front(record)
        return record
