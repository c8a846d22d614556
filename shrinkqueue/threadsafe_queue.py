"""A minimal thread-safe FIFO queue with blocking and non-blocking pops."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable, Deque, Generic, TypeVar

T = TypeVar("T")


class ThreadSafeQueue(Generic[T]):
    """Unbounded FIFO queue guarded by a single lock.

    ``size`` and ``empty`` return snapshots only; they must not drive
    concurrent control flow.
    """

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._not_empty = threading.Condition(threading.Lock())

    def push(self, value: T) -> None:
        """Append ``value`` and wake one waiting consumer."""
        with self._not_empty:
            self._items.append(value)
            self._not_empty.notify()

    def emplace(self, factory: Callable[..., T], *args: Any, **kwargs: Any) -> None:
        """Build an item with ``factory(*args, **kwargs)`` and enqueue it."""
        self.push(factory(*args, **kwargs))

    def pop(self) -> T:
        """Remove and return the front item, blocking until one exists."""
        with self._not_empty:
            self._not_empty.wait_for(lambda: bool(self._items))
            return self._items.popleft()

    def try_pop(self, default: Any = None) -> Any:
        """Remove and return the front item, or ``default`` if the queue is empty."""
        with self._not_empty:
            if not self._items:
                return default
            return self._items.popleft()

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