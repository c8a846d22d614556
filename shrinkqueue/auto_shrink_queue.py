"""Thread-safe blocking queue that periodically compacts its storage."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Deque, Generic, TypeVar

T = TypeVar("T")


class AutoShrinkBlockingQueue(Generic[T]):
    """Blocking FIFO queue that rebuilds its storage once it drains below a high-water mark.

    Every ``shrink_check_interval`` successful pops the queue checks its
    length; if it is empty or shorter than ``last_high_mark * shrink_factor``
    the storage is rebuilt and the high-water mark is reset to the current
    length. ``size``, ``empty`` and ``last_high_mark`` are snapshots only.
    """

    def __init__(self, shrink_check_interval: int = 150, shrink_factor: float = 0.25) -> None:
        self._shrink_check_interval = shrink_check_interval
        self._shrink_factor = shrink_factor
        self._op_count = 0
        self._high_mark = 0
        self._items: Deque[T] = deque()
        self._not_empty = threading.Condition(threading.Lock())

    def push(self, value: T) -> None:
        """Append ``value``, update the high-water mark and wake one consumer."""
        with self._not_empty:
            self._items.append(value)
            self._high_mark = max(self._high_mark, len(self._items))
            self._not_empty.notify()

    def pop(self) -> T:
        """Remove and return the front item, blocking until one exists."""
        with self._not_empty:
            self._not_empty.wait_for(lambda: bool(self._items))
            value = self._items.popleft()
            self._auto_shrink()
            return value

    def try_pop(self, default: Any = None) -> Any:
        """Remove and return the front item, or ``default`` if the queue is empty."""
        with self._not_empty:
            if not self._items:
                return default
            value = self._items.popleft()
            self._auto_shrink()
            return value

    def empty(self) -> bool:
        """Whether the queue currently holds no items (snapshot)."""
        with self._not_empty:
            return not self._items

    def size(self) -> int:
        """Number of items currently queued (snapshot)."""
        with self._not_empty:
            return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def last_high_mark(self) -> int:
        """Largest length reached since the last shrink."""
        with self._not_empty:
            return self._high_mark

    def _auto_shrink(self) -> None:
        # Caller holds the lock.
        self._op_count += 1
        if self._op_count < self._shrink_check_interval:
            return
        self._op_count = 0
        length = len(self._items)
        if length == 0 or length < self._high_mark * self._shrink_factor:
            self._items = deque(self._items)
            self._high_mark = length