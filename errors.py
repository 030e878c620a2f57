"""
Exception types raised by the collector.
"""


class ConsoleTapError(Exception):
    """Base class for all collector errors."""


class TabNotFound(ConsoleTapError):
    """No open tab has a title containing the requested substring."""

    def __init__(self, title: str):
        super().__init__(f'Tab with title containing "{title}" not found')
        self.title = title


class ConnectionFailed(ConsoleTapError):
    """Listing, opening or enabling a CDP session failed."""


class CloseFailed(ConsoleTapError):
    """Tearing down a CDP session failed. Logged, never raised from stop()."""
