# shrinkqueue

Thread-safe FIFO queues for producer/consumer code, and small tools for
watching how much memory a process holds while such queues fill and drain.

## Install

```
pip install shrinkqueue
```

With the test dependencies:

```
pip install "shrinkqueue[test]"
```

## Queues

### `ThreadSafeQueue` (`shrinkqueue.threadsafe_queue`)

A lock-protected, unbounded FIFO. `push()` appends and wakes one waiting
consumer; `pop()` blocks until an item is available; `try_pop(default=None)`
returns at once, giving back `default` when the queue is empty.
`emplace(factory, *args, **kwargs)` builds an item with the factory and
enqueues it.

```python
from shrinkqueue.threadsafe_queue import ThreadSafeQueue

q = ThreadSafeQueue()
q.push(1)
q.emplace(dict, name="job")
assert q.pop() == 1
assert q.try_pop() == {"name": "job"}
assert q.empty()
```

### `AutoShrinkBlockingQueue` (`shrinkqueue.auto_shrink_queue`)

The same `push` / `pop` / `try_pop` / `size` / `empty` interface, constructed
as `AutoShrinkBlockingQueue(shrink_check_interval=150, shrink_factor=0.25)`.

Each push raises the high mark if the queue has grown past it. Every
`shrink_check_interval` successful pops (a `try_pop` on an empty queue does
not count) the queue checks its length: if it is empty, or shorter than
`high mark * shrink_factor`, its storage is rebuilt and the high mark is reset
to the current length.

```python
from shrinkqueue.auto_shrink_queue import AutoShrinkBlockingQueue

q = AutoShrinkBlockingQueue(shrink_check_interval=4, shrink_factor=0.2)
for i in range(20):
    q.push(i)
assert q.last_high_mark() == 20
for _ in range(20):
    q.pop()
assert q.last_high_mark() == 0   # the 20th pop was a check on an empty queue
```

`size()`, `len(q)`, `empty()` and `last_high_mark()` are snapshots only. Do not
base concurrent logic on them; use `pop()` / `try_pop()` instead.

## Memory inspection (`shrinkqueue.memstats`)

- `get_memory_stats()` returns a `MemoryStats` with `rss_mib`, `commit_mib`,
  `page_faults` and `peak_working_set` (MiB) for the current process, read via
  psutil. Where a figure is not available on the platform a close equivalent
  is used (virtual size for committed memory, the maximum resident size for
  the peak); if the process cannot be read at all, the fields are zero.
- `format_memory_stats(stats)` renders one line.
- `log_memory_snapshot(context="")` logs a numbered snapshot to the
  `shrinkqueue` logger and returns the line; `pause_for_check(msg)` does the
  same followed by a blank log line.
- `setup_logger(name, log_dir=None)` creates a logger writing to an hourly
  rotated `<log_dir>/<name>.log` (default: a `logs` directory beside the
  running script). Setting up the same name twice raises `ValueError`.

```python
from shrinkqueue.memstats import get_memory_stats, format_memory_stats, log_memory_snapshot

print(format_memory_stats(get_memory_stats()))
log_memory_snapshot("after filling the queue")
```

## Demos

The demo functions can be called directly:

- `shrinkqueue.adapter_demo.run_adapter_queue_demo(...)` floods an
  `AutoShrinkBlockingQueue` from many producer threads with 1 KiB items,
  drains it with polling consumers, then refills and drains it again. It
  returns an `AdapterDemoResult` whose `passed` property tells whether every
  item was consumed and the queue ended empty.
- `shrinkqueue.lockfree_demo.run_threadsafe_demo(...)` runs producers and
  polling consumers over a `collections.deque` and returns
  `LockFreeDemoStats` (`balanced` is true when push and pop totals match);
  `run_expand_demo(count)` pushes and pops `count` integers and returns
  `ExpandDemoStats`.
- `shrinkqueue.containers_demo.run_container_demo(count)` fills and empties a
  list, deques, a `queue.SimpleQueue` and dicts, logging memory at each step,
  and returns how many elements each one removed one at a time.

All of them raise `ValueError` for negative counts.

## Command line

```
shrinkqueue-demo [adapter|containers|lockfree|expand] [--count N] [--producers N] [--consumers N] [--logger-name NAME] [--log-dir DIR]
```

runs one demo (default `adapter`). Its output goes to the log file set up
with `--logger-name` (default `sg_common`) in `--log-dir`, not to the console.

```
shrinkqueue-bench [--iterations N] [--filter TEXT]
```

times the auto-shrinking queue in single-threaded push and pop, parallel push
and pop, producer/consumer runs, a sweep over shrink settings and large-object
push and pop, and prints a table. `--iterations` (default 1000) is per thread;
`--filter` keeps only cases whose name contains the text. The individual
`bench_*` functions and `run_benchmarks(iterations)` in `shrinkqueue.bench`
return `BenchResult` objects.

## Limits

The memory figures describe the whole Python process. Rebuilding a queue's
storage frees what the queue held, but whether the interpreter hands that
memory back to the operating system is up to its allocator, so the numbers in
the snapshots may not fall after a drain. The `lockfree` demo uses
`collections.deque`; it is not a lock-free data structure.