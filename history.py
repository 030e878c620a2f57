"""
Fixed-capacity, newest-first history used for both logs and errors.
"""
import threading
from collections import deque
from typing import Deque, Generic, List, TypeVar

T = TypeVar('T')


class BoundedHistory(Generic[T]):
    """Newest item at the front; pushing at capacity drops the oldest item first."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items: Deque[T] = deque()
        self._lock = threading.Lock()

    def push_front(self, item: T) -> None:
        with self._lock:
            if len(self._items) >= self.capacity:
                self._items.pop()
            self._items.appendleft(item)

    def slice(self, start: int, count: int) -> List[T]:
        """Up to `count` items beginning at offset `start`, in stored (newest-first) order."""
        start = max(start, 0)
        count = max(count, 0)
        return self.snapshot()[start:start + count]

    def snapshot(self) -> List[T]:
        """Every stored item, newest first, copied under the lock."""
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
