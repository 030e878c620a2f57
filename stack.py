"""
Stack trace helpers: noise-frame filtering, frame rendering and fingerprints.
"""
import hashlib
from typing import Iterable, List, Optional

IGNORED_STACK_PATTERNS = ('@vite/', 'node_modules')
UNKNOWN_SOURCE = '<unknown>'
FINGERPRINT_LENGTH = 10


def is_noise_frame(url: str, patterns: Iterable[str] = IGNORED_STACK_PATTERNS) -> bool:
    """True if the frame URL points into build tooling or vendored dependencies."""
    return any(pattern in url for pattern in patterns)


def fingerprint(text: str) -> str:
    return hashlib.sha1(text.encode('utf-8')).hexdigest()[:FINGERPRINT_LENGTH]


def _call_frames(stack_trace: Optional[dict]) -> List[dict]:
    if not isinstance(stack_trace, dict):
        return []
    frames = stack_trace.get('callFrames')
    if not isinstance(frames, list):
        return []
    return [frame for frame in frames if isinstance(frame, dict)]


def surviving_frames(stack_trace: Optional[dict],
                     patterns: Iterable[str] = IGNORED_STACK_PATTERNS) -> List[dict]:
    patterns = tuple(patterns)
    return [f for f in _call_frames(stack_trace) if not is_noise_frame(f.get('url', ''), patterns)]


def format_frame(frame: dict) -> str:
    name = frame.get('functionName') or '<anonymous>'
    return f"  at {name} ({frame.get('url', '')}:{frame.get('lineNumber', 0)}:{frame.get('columnNumber', 0)})"


def format_stack(stack_trace: Optional[dict],
                 patterns: Iterable[str] = IGNORED_STACK_PATTERNS) -> List[str]:
    """
    Renders the non-noise frames of a CDP StackTrace, keeping their order.
    A missing or malformed trace renders as an empty list.
    """
    return [format_frame(frame) for frame in surviving_frames(stack_trace, patterns)]


def top_frame_url(stack_trace: Optional[dict],
                  patterns: Iterable[str] = IGNORED_STACK_PATTERNS) -> str:
    frames = surviving_frames(stack_trace, patterns)
    if not frames:
        return UNKNOWN_SOURCE
    return frames[0].get('url') or UNKNOWN_SOURCE
