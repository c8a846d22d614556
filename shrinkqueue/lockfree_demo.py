"""Stress runs of an unbounded non-blocking queue: thread safety and growth."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass

from shrinkqueue.memstats import pause_for_check

logger = logging.getLogger("shrinkqueue")

_PAYLOAD_SIZE = 1024
_YIELD_EVERY = 1000


@dataclass
class LockFreeDemoStats:
    """Counters gathered by :func:`run_threadsafe_demo`."""

    total_push: int = 0
    fail_push: int = 0
    total_pop: int = 0
    fail_pop: int = 0

    @property
    def balanced(self) -> bool:
        """Whether every pushed item was popped exactly once and no push failed."""
        return self.total_push == self.total_pop and self.fail_push == 0


@dataclass
class ExpandDemoStats:
    """Counters gathered by :func:`run_expand_demo`."""

    success: int = 0
    fail: int = 0
    popped: int = 0


class _Tally:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.stats = LockFreeDemoStats()

    def add(self, field: str) -> None:
        with self._lock:
            setattr(self.stats, field, getattr(self.stats, field) + 1)


def _payload(producer: int, index: int) -> bytes:
    text = f"producer-{producer}, idx={index}".encode()[: _PAYLOAD_SIZE - 1]
    return text.ljust(_PAYLOAD_SIZE, b"\0")


def run_threadsafe_demo(
    n_producers: int = 100,
    n_consumers: int = 1,
    push_per_producer: int = 100_000,
) -> LockFreeDemoStats:
    """Push 1 KiB items from many producers while consumers poll them off.

    A failed pop only means the queue was momentarily empty; the run is
    sound when the push and pop totals match and no push failed.
    """
    if n_producers < 0 or n_consumers < 0 or push_per_producer < 0:
        raise ValueError("n_producers, n_consumers and push_per_producer must be non-negative")

    queue: deque[bytes] = deque()
    tally = _Tally()
    producing_done = threading.Event()

    def produce(pi: int) -> None:
        for i in range(push_per_producer):
            queue.append(_payload(pi, i))
            tally.add("total_push")
            if i % _YIELD_EVERY == 0:
                time.sleep(0)
        logger.info("[Producer-%d] Finished.", pi)

    def consume(ci: int) -> None:
        while not producing_done.is_set() or queue:
            try:
                queue.popleft()
            except IndexError:
                tally.add("fail_pop")
                time.sleep(0.00001)
                logger.warning("[Consumer-%d] Pop failed: queue momentarily empty", ci)
            else:
                tally.add("total_pop")
        logger.info("[Consumer-%d] Finished.", ci)

    producers = [threading.Thread(target=produce, args=(pi,)) for pi in range(n_producers)]
    consumers = [threading.Thread(target=consume, args=(ci,)) for ci in range(n_consumers)]
    for thread in producers + consumers:
        thread.start()

    for thread in producers:
        thread.join()
    producing_done.set()
    logger.info("All producers finished!")
    for thread in consumers:
        thread.join()
    logger.info("All consumers finished!")

    stats = tally.stats
    logger.info("Stat: total push = %d, fail push = %d.", stats.total_push, stats.fail_push)
    logger.info("Stat: total pop  = %d, fail pop  = %d.", stats.total_pop, stats.fail_pop)
    logger.info("Is total push == total pop: %s", stats.total_push == stats.total_pop)
    pause_for_check("Thread safe test finished")
    return stats


def run_expand_demo(count: int = 1_000_000) -> ExpandDemoStats:
    """Push ``count`` integers into an unbounded queue, then pop them all."""
    if count < 0:
        raise ValueError("count must be non-negative")

    queue: deque[int] = deque()
    stats = ExpandDemoStats()
    for i in range(count):
        queue.append(i)
        stats.success += 1
    logger.info("Push finished, success = %d, fail = %d", stats.success, stats.fail)
    pause_for_check("Push finished")

    while True:
        try:
            queue.popleft()
        except IndexError:
            break
        stats.popped += 1
    logger.info("Pop finished, total pop = %d", stats.popped)
    pause_for_check("Pop finished")
    return stats