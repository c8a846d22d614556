"""Walk-through of filling and emptying common containers with memory snapshots."""

from __future__ import annotations

import logging
import queue
from collections import deque
from contextlib import contextmanager
from typing import Iterator

from shrinkqueue.memstats import pause_for_check

logger = logging.getLogger("shrinkqueue")

_PAYLOAD_SIZE = 1024


def _payload() -> bytearray:
    return bytearray(_PAYLOAD_SIZE)


@contextmanager
def section(name: str) -> Iterator[None]:
    """Log begin and end markers around a named part of the demo."""
    logger.info("")
    logger.info("[Begin] Part:%s===========", name)
    try:
        yield
    finally:
        logger.info("[End] Part:%s===========", name)
        logger.info("")


def _vector_demo(count: int) -> int:
    items = [_payload() for _ in range(count)]
    pause_for_check(f"vector: after inserting {count} objects")

    pops = 0
    while items:
        items.pop()
        pops += 1
    logger.info("vector: emptied with pop() (%d removed), capacity kept", pops)
    pause_for_check("vector: after emptying with pop()")

    items.extend(_payload() for _ in range(count))
    pause_for_check(f"vector: after inserting {count} objects again")

    items.clear()
    logger.info("vector: clear() done, elements released")
    pause_for_check("vector: after clear()")

    items = []
    logger.info("vector: replaced with an empty container")
    pause_for_check("vector: after replacing with an empty container")
    return pops


def _deque_demo(count: int) -> int:
    items: deque[bytearray] = deque(_payload() for _ in range(count))
    pause_for_check(f"deque: after inserting {count} objects")

    pops = 0
    while items:
        items.pop()
        pops += 1
    logger.info("deque: emptied with pop() (%d removed), blocks may be kept", pops)
    pause_for_check("deque: after emptying with pop()")

    items.extend(_payload() for _ in range(count))
    pause_for_check(f"deque: after inserting {count} objects again")

    items.clear()
    logger.info("deque: clear() done, elements released")
    pause_for_check("deque: after clear()")

    items = deque(items)
    logger.info("deque: storage rebuilt to fit its contents")
    pause_for_check("deque: after rebuilding storage")

    items = deque()
    logger.info("deque: replaced with an empty container")
    pause_for_check("deque: after replacing with an empty container")
    return pops


def _drain(fifo: queue.SimpleQueue) -> int:
    removed = 0
    while not fifo.empty():
        fifo.get_nowait()
        removed += 1
    return removed


def _queue_demo(count: int) -> int:
    fifo: queue.SimpleQueue[bytearray] = queue.SimpleQueue()
    for _ in range(count):
        fifo.put(_payload())
    pause_for_check(f"queue: after inserting {count} objects")

    pops = _drain(fifo)
    logger.info("queue: emptied one by one (%d removed)", pops)
    pause_for_check("queue: after emptying one by one")

    for _ in range(count):
        fifo.put(_payload())
    pause_for_check(f"queue: after inserting {count} objects again")

    cleared = _drain(fifo)
    logger.info("queue: cleared by popping (%d removed), there is no clear()", cleared)
    pause_for_check("queue: after clearing by popping")

    fifo = queue.SimpleQueue()
    logger.info("queue: replaced with an empty container")
    pause_for_check("queue: after replacing with an empty container")
    return pops


def _linked_list_demo(count: int) -> int:
    items: deque[bytearray] = deque(_payload() for _ in range(count))
    logger.info("list: after inserting %d objects", count)
    pause_for_check(f"list: after inserting {count} objects")

    pops = 0
    while items:
        items.popleft()
        pops += 1
    logger.info("list: emptied from the front, every node released")
    pause_for_check("list: after emptying from the front")

    items.clear()
    logger.info("list: after clear()")
    pause_for_check("list: after clear()")

    items = deque()
    logger.info("list: replaced with an empty container")
    pause_for_check("list: after replacing with an empty container")
    return pops


def _mapping_demo(label: str, count: int) -> int:
    mapping = {key: _payload() for key in range(count)}
    logger.info("%s: after inserting %d objects", label, count)
    pause_for_check(f"{label}: after inserting {count} objects")

    erased = 0
    for key in range(count):
        del mapping[key]
        erased += 1
    logger.info("%s: every key erased, entries released", label)
    pause_for_check(f"{label}: after erasing every key")

    mapping.clear()
    logger.info("%s: after clear()", label)
    pause_for_check(f"{label}: after clear()")

    mapping = {}
    logger.info("%s: replaced with an empty container", label)
    pause_for_check(f"{label}: after replacing with an empty container")
    return erased


def run_container_demo(count: int = 100_000) -> dict[str, int]:
    """Fill and empty several containers of 1 KiB items, logging memory at each step.

    Returns, per container, how many elements were removed one at a time.
    """
    if count < 0:
        raise ValueError("count must be non-negative")

    removed: dict[str, int] = {}
    with section("vector test"):
        removed["vector"] = _vector_demo(count)
    with section("deque test"):
        removed["deque"] = _deque_demo(count)
    with section("queue test"):
        removed["queue"] = _queue_demo(count)
    with section("list test"):
        removed["list"] = _linked_list_demo(count)
    with section("map test"):
        removed["map"] = _mapping_demo("map", count)
    with section("unordered_map test"):
        removed["unordered_map"] = _mapping_demo("unordered_map", count)

    logger.info("All tests finished.")
    return removed