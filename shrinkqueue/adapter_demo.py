"""Multi-producer stress run of the auto-shrinking queue with memory snapshots."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from shrinkqueue.auto_shrink_queue import AutoShrinkBlockingQueue
from shrinkqueue.memstats import log_memory_snapshot

logger = logging.getLogger("shrinkqueue")

_PAYLOAD_SIZE = 1024
_PAYLOAD_FILL = 0xFE
_PRODUCER_PAUSE_EVERY = 500
_CONSUMER_PAUSE_AT = 4000


@dataclass
class AdapterDemoResult:
    """Outcome of :func:`run_adapter_queue_demo`."""

    expected: int
    total_push: int
    total_pop: int
    queue_empty: bool
    leftover: object
    refill_size: int
    drained_size: int
    final_high_mark: int

    @property
    def passed(self) -> bool:
        """Whether every push was consumed and the queue ended up empty."""
        return (
            self.total_push == self.expected
            and self.total_pop == self.expected
            and self.queue_empty
            and self.leftover is None
        )


class _Counter:
    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def _payload() -> bytes:
    return bytes([_PAYLOAD_FILL]) * _PAYLOAD_SIZE


def _check(ok: bool, ok_message: str, fail_message: str) -> None:
    if ok:
        logger.info("[OK] %s", ok_message)
    else:
        logger.error("[FAIL] %s", fail_message)


def run_adapter_queue_demo(
    producers: int = 20,
    consumers: int = 1,
    produce_count: int = 100_000,
    shrink_check_interval: int = 500,
    shrink_factor: float = 0.2,
) -> AdapterDemoResult:
    """Flood an :class:`AutoShrinkBlockingQueue` from many threads, drain it, then refill and drain again.

    Each producer pushes ``produce_count`` 1 KiB items, pausing briefly every
    500 pushes; consumers poll with ``try_pop`` until all items are taken.
    Memory snapshots are logged at each stage.
    """
    if producers < 0 or consumers < 0 or produce_count < 0:
        raise ValueError("producers, consumers and produce_count must be non-negative")

    queue: AutoShrinkBlockingQueue[bytes] = AutoShrinkBlockingQueue(shrink_check_interval, shrink_factor)
    expected = producers * produce_count
    total_push = _Counter()
    total_pop = _Counter()

    def produce() -> None:
        for j in range(produce_count):
            queue.push(_payload())
            total_push.increment()
            if j % _PRODUCER_PAUSE_EVERY == 0:
                time.sleep(0.001)

    def consume() -> None:
        popcount = 0
        while total_pop.value < expected:
            if queue.try_pop() is not None:
                total_pop.increment()
                popcount += 1
                if popcount == _CONSUMER_PAUSE_AT:
                    time.sleep(0.1)
            else:
                time.sleep(0.00002)

    threads = [threading.Thread(target=produce) for _ in range(producers)]
    threads += [threading.Thread(target=consume) for _ in range(consumers)]
    for thread in threads:
        thread.start()

    logger.info("[Before thread join] queue size=%d", queue.size())
    log_memory_snapshot("Before thread join")

    for thread in threads:
        thread.join()

    logger.info("[After thread join] queue size=%d", queue.size())
    log_memory_snapshot("After thread join")

    pushed, popped = total_push.value, total_pop.value
    _check(
        pushed == expected,
        f"Total push: {pushed}, expect {expected}",
        f"Total push: {pushed}, expect {expected}",
    )
    _check(
        popped == expected,
        f"Total pop: {popped}, expect {expected}",
        f"Total pop: {popped}, expect {expected}",
    )
    queue_empty = queue.empty()
    _check(queue_empty, "Queue is empty", f"Queue should be empty but size={queue.size()}")
    leftover = queue.try_pop()
    _check(
        leftover is None,
        "Queue try_pop after empty is None",
        "Queue try_pop after empty should be None",
    )

    logger.info("[PASS] Total push/pop checked. Now check memory shrink after high peak...")
    log_memory_snapshot("Pass all push/pop checked. Queue empty now")

    logger.info("=============[Test case2]=================")
    for _ in range(produce_count):
        queue.push(_payload())
    refill_size = queue.size()
    logger.info("[Test] After fill, size=%d", refill_size)
    log_memory_snapshot("[Test] After fill")

    for _ in range(produce_count):
        queue.pop()
    drained_size = queue.size()
    logger.info("[Test] After pop all, size=%d", drained_size)
    log_memory_snapshot("[Test] After pop all")

    logger.info("[PASS] All test finished!")
    return AdapterDemoResult(
        expected=expected,
        total_push=pushed,
        total_pop=popped,
        queue_empty=queue_empty,
        leftover=leftover,
        refill_size=refill_size,
        drained_size=drained_size,
        final_high_mark=queue.last_high_mark(),
    )