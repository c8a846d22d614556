"""Micro-benchmarks of the auto-shrinking blocking queue."""

from __future__ import annotations

import argparse
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from shrinkqueue.auto_shrink_queue import AutoShrinkBlockingQueue

_FAT_SIZE = 4096


@dataclass
class BenchResult:
    """Timing of one benchmark case."""

    name: str
    iterations: int
    threads: int
    operations: int
    seconds: float
    counters: dict[str, float] = field(default_factory=dict)

    @property
    def ns_per_op(self) -> float:
        """Wall time per queue operation in nanoseconds."""
        if self.operations == 0:
            return 0.0
        return self.seconds * 1e9 / self.operations

    @property
    def ops_per_second(self) -> float:
        """Queue operations completed per second."""
        if self.operations == 0:
            return 0.0
        if self.seconds <= 0:
            return math.inf
        return self.operations / self.seconds


@dataclass
class _FatObj:
    buf: bytes = bytes(_FAT_SIZE)
    id: int = 0


def _name(base: str, *args: object, threads: int = 1) -> str:
    parts = [base, *(str(arg) for arg in args)]
    if threads > 1:
        parts.append(f"threads:{threads}")
    return "/".join(parts)


def _check(iterations: int, threads: int = 1) -> None:
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    if threads < 1:
        raise ValueError("threads must be at least 1")


def _timed(loop: Callable[[], None]) -> float:
    start = time.perf_counter()
    loop()
    return time.perf_counter() - start


def _run_parallel(threads: int, worker: Callable[[int], None]) -> float:
    """Run ``worker(index)`` on ``threads`` threads released together; return the elapsed time."""
    marks: dict[str, float] = {}
    start_line = threading.Barrier(threads, action=lambda: marks.__setitem__("start", time.perf_counter()))
    finish_line = threading.Barrier(threads, action=lambda: marks.__setitem__("end", time.perf_counter()))

    def body(index: int) -> None:
        start_line.wait()
        try:
            worker(index)
        finally:
            finish_line.wait()

    pool = [threading.Thread(target=body, args=(index,)) for index in range(threads)]
    for thread in pool:
        thread.start()
    for thread in pool:
        thread.join()
    return marks["end"] - marks["start"]


def bench_single_push(iterations: int = 100_000) -> BenchResult:
    """Push ``iterations`` integers from one thread."""
    _check(iterations)
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue()

    def loop() -> None:
        for _ in range(iterations):
            queue.push(42)

    return BenchResult(_name("SinglePush"), iterations, 1, iterations, _timed(loop))


def bench_single_try_pop(iterations: int = 100_000, prefill: int = 1000) -> BenchResult:
    """Call ``try_pop`` ``iterations`` times on a queue prefilled with ``prefill`` items."""
    _check(iterations)
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue()
    for _ in range(prefill):
        queue.push(42)

    def loop() -> None:
        for _ in range(iterations):
            queue.try_pop()

    return BenchResult(_name("SingleTryPop", prefill), iterations, 1, iterations, _timed(loop))


def bench_push_try_pop(iterations: int = 100_000) -> BenchResult:
    """Alternate one push and one ``try_pop`` ``iterations`` times."""
    _check(iterations)
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue()

    def loop() -> None:
        for _ in range(iterations):
            queue.push(123)
            queue.try_pop()

    return BenchResult(_name("SinglePushTryPop"), iterations, 1, 2 * iterations, _timed(loop))


def bench_parallel_push(iterations: int = 100_000, threads: int = 2) -> BenchResult:
    """Push ``iterations`` items from each of ``threads`` contending threads."""
    _check(iterations, threads)
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue()

    def worker(_index: int) -> None:
        for _ in range(iterations):
            queue.push(42)

    seconds = _run_parallel(threads, worker)
    return BenchResult(
        _name("ParallelPush", threads=threads), iterations, threads, iterations * threads, seconds
    )


def bench_parallel_try_pop(iterations: int = 100_000, threads: int = 2, prefill: int = 10_000) -> BenchResult:
    """Call ``try_pop`` ``iterations`` times from each thread on a prefilled queue."""
    _check(iterations, threads)
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue()
    for _ in range(prefill):
        queue.push(42)

    def worker(_index: int) -> None:
        for _ in range(iterations):
            queue.try_pop()

    seconds = _run_parallel(threads, worker)
    return BenchResult(
        _name("ParallelTryPop", prefill, threads=threads), iterations, threads, iterations * threads, seconds
    )


def bench_producer_consumer(iterations: int = 10_000, threads: int = 2, batch: int = 1) -> BenchResult:
    """Even-numbered threads push batches, odd-numbered threads pop as many items.

    Counters report the totals produced and consumed and their rates.
    """
    _check(iterations, threads)
    if batch < 1:
        raise ValueError("batch must be at least 1")
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue()
    produced = [0] * threads
    consumed = [0] * threads

    def worker(index: int) -> None:
        if index % 2 == 0:
            for _ in range(iterations):
                for item in range(batch):
                    queue.push(item)
                    produced[index] += 1
        else:
            for _ in range(iterations * batch):
                while queue.try_pop() is None:
                    time.sleep(0)
                consumed[index] += 1

    seconds = _run_parallel(threads, worker)
    produce_total = sum(produced)
    consume_total = sum(consumed)
    rate = (lambda total: total / seconds) if seconds > 0 else (lambda total: math.inf if total else 0.0)
    counters = {
        "produce_total": float(produce_total),
        "consume_total": float(consume_total),
        "produce_rate": rate(produce_total),
        "consume_rate": rate(consume_total),
    }
    return BenchResult(
        _name("ProducerConsumer", batch, threads=threads),
        iterations,
        threads,
        produce_total + consume_total,
        seconds,
        counters,
    )


def bench_shrink_sweep(
    iterations: int = 100_000, shrink_check_interval: int = 100, shrink_percent: int = 15
) -> BenchResult:
    """Alternate push and ``try_pop`` on a queue with the given shrink settings."""
    _check(iterations)
    queue: AutoShrinkBlockingQueue[int] = AutoShrinkBlockingQueue(
        shrink_check_interval, shrink_percent / 100.0
    )

    def loop() -> None:
        for _ in range(iterations):
            queue.push(42)
            queue.try_pop()

    return BenchResult(
        _name("ShrinkSweep", shrink_check_interval, shrink_percent),
        iterations,
        1,
        2 * iterations,
        _timed(loop),
    )


def _bench_fat_single_push(iterations: int) -> BenchResult:
    _check(iterations)
    queue: AutoShrinkBlockingQueue[_FatObj] = AutoShrinkBlockingQueue()
    obj = _FatObj(id=666)

    def loop() -> None:
        for _ in range(iterations):
            queue.push(obj)

    return BenchResult(_name("FatObjSinglePush"), iterations, 1, iterations, _timed(loop))


def _bench_fat_single_try_pop(iterations: int, prefill: int) -> BenchResult:
    _check(iterations)
    queue: AutoShrinkBlockingQueue[_FatObj] = AutoShrinkBlockingQueue()
    obj = _FatObj(id=888)
    for _ in range(prefill):
        queue.push(obj)

    def loop() -> None:
        for _ in range(iterations):
            queue.try_pop()

    return BenchResult(_name("FatObjSingleTryPop", prefill), iterations, 1, iterations, _timed(loop))


def _cases(iterations: int) -> list[tuple[str, Callable[[], BenchResult]]]:
    cases: list[tuple[str, Callable[[], BenchResult]]] = [
        (_name("SinglePush"), lambda: bench_single_push(iterations)),
    ]
    cases += [
        (_name("SingleTryPop", prefill), lambda prefill=prefill: bench_single_try_pop(iterations, prefill))
        for prefill in (1000, 10_000, 100_000)
    ]
    cases.append((_name("SinglePushTryPop"), lambda: bench_push_try_pop(iterations)))
    cases += [
        (_name("ParallelPush", threads=threads), lambda threads=threads: bench_parallel_push(iterations, threads))
        for threads in (2, 4, 8)
    ]
    cases += [
        (
            _name("ParallelTryPop", 10_000, threads=threads),
            lambda threads=threads: bench_parallel_try_pop(iterations, threads, 10_000),
        )
        for threads in (2, 4, 8)
    ]
    cases += [
        (
            _name("ProducerConsumer", batch, threads=threads),
            lambda threads=threads, batch=batch: bench_producer_consumer(iterations, threads, batch),
        )
        for threads in (2, 4, 8)
        for batch in (1, 10, 100)
    ]
    cases += [
        (
            _name("ShrinkSweep", interval, percent),
            lambda interval=interval, percent=percent: bench_shrink_sweep(iterations, interval, percent),
        )
        for interval, percent in ((100, 15), (100, 25), (500, 20), (1000, 20))
    ]
    cases.append((_name("FatObjSinglePush"), lambda: _bench_fat_single_push(iterations)))
    cases += [
        (_name("FatObjSingleTryPop", prefill), lambda prefill=prefill: _bench_fat_single_try_pop(iterations, prefill))
        for prefill in (1000, 10_000)
    ]
    return cases


def run_benchmarks(iterations: int = 1000) -> list[BenchResult]:
    """Run every benchmark case with ``iterations`` iterations per thread."""
    _check(iterations)
    return [run() for _, run in _cases(iterations)]


def _format(result: BenchResult) -> str:
    line = f"{result.name:<36} {result.seconds * 1e3:>10.3f} ms {result.ns_per_op:>12.1f} ns/op"
    if result.counters:
        extras = " ".join(f"{key}={value:.6g}" for key, value in result.counters.items())
        line = f"{line}  {extras}"
    return line


def main(argv: list[str] | None = None) -> int:
    """Run the benchmarks whose names contain ``--filter`` and print a table."""
    parser = argparse.ArgumentParser(prog="shrinkqueue-bench", description="Benchmark the auto-shrinking queue.")
    parser.add_argument("--iterations", type=int, default=1000, help="iterations per thread")
    parser.add_argument("--filter", default="", help="run only cases whose name contains this text")
    args = parser.parse_args(argv)
    if args.iterations < 1:
        parser.error("--iterations must be at least 1")

    print(f"{'Benchmark':<36} {'Time':>13} {'Per op':>18}")
    for name, run in _cases(args.iterations):
        if args.filter in name:
            print(_format(run()))
    return 0