"""
consoletap - Collect console logs and runtime errors from a browser tab.

Connects to a single tab of a browser started with --remote-debugging-port,
keeps the most recent logs and fingerprinted errors in bounded histories,
and reconnects automatically when the tab or browser goes away.
"""

from .collector import LogCollector
from .config import CollectorConfig
from .entries import ErrorEntry, LogEntry, TabInfo
from .errors import CloseFailed, ConnectionFailed, ConsoleTapError, TabNotFound
from .session import SessionManager, SessionState

__version__ = "0.1.0"
__all__ = [
    "LogCollector",
    "CollectorConfig",
    "SessionManager",
    "SessionState",
    "LogEntry",
    "ErrorEntry",
    "TabInfo",
    "ConsoleTapError",
    "TabNotFound",
    "ConnectionFailed",
    "CloseFailed",
]
