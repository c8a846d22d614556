import threading
import time

from shrinkqueue.auto_shrink_queue import AutoShrinkBlockingQueue

_MISSING = object()


def test_push_pop_single_thread():
    q = AutoShrinkBlockingQueue()
    q.push(1)
    q.push(2)
    assert q.size() == 2
    assert not q.empty()
    assert q.pop() == 1
    assert q.pop() == 2
    assert q.empty()


def test_try_pop_when_empty():
    q = AutoShrinkBlockingQueue()
    assert q.try_pop() is None
    assert q.try_pop(_MISSING) is _MISSING


def test_try_pop_normal():
    q = AutoShrinkBlockingQueue()
    q.push("hello")
    assert q.try_pop(_MISSING) == "hello"
    assert q.empty()


class Owned:
    def __init__(self, x):
        self.x = x


def test_can_push_pop_custom_object():
    q = AutoShrinkBlockingQueue()
    obj = Owned(99)
    q.push(obj)
    v = q.pop()
    assert v is obj
    assert v.x == 99


def test_can_push_boxed_value():
    q = AutoShrinkBlockingQueue()
    q.push([42])
    out = q.pop()
    assert out == [42]


def test_pop_blocks_until_push():
    q = AutoShrinkBlockingQueue()
    started = threading.Event()
    popped = []

    def consumer():
        started.set()
        popped.append(q.pop())

    th = threading.Thread(target=consumer)
    th.start()
    started.wait()
    time.sleep(0.05)
    assert popped == []
    assert q.size() == 0
    q.push(123)
    th.join(timeout=5)
    assert popped == [123]
    assert q.empty()
    assert q.last_high_mark() == 1


def test_multi_threaded_push_pop():
    q = AutoShrinkBlockingQueue()
    n = 500
    pushed = list(range(n))
    popped = []

    producer = threading.Thread(target=lambda: [q.push(v) for v in pushed])
    consumer = threading.Thread(target=lambda: [popped.append(q.pop()) for _ in range(n)])
    producer.start()
    consumer.start()
    producer.join()
    consumer.join()
    assert sorted(popped) == pushed
    assert q.size() == 0
    assert q.try_pop(_MISSING) is _MISSING


def test_multi_threaded_try_pop_stress():
    q = AutoShrinkBlockingQueue()
    producer_n, consumer_n, per_producer = 8, 8, 64
    total = producer_n * per_producer
    output = []
    lock = threading.Lock()

    def produce(i):
        for j in range(per_producer):
            q.push(i * per_producer + j)

    def consume():
        while True:
            with lock:
                if len(output) >= total:
                    return
            v = q.try_pop(_MISSING)
            if v is _MISSING:
                time.sleep(0)
                continue
            with lock:
                output.append(v)

    threads = [threading.Thread(target=produce, args=(i,)) for i in range(producer_n)]
    threads += [threading.Thread(target=consume) for _ in range(consumer_n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(output) == total
    assert sorted(output) == list(range(total))
    assert q.size() == 0
    assert q.try_pop(_MISSING) is _MISSING


def test_shrink_high_mark_on_empty():
    q = AutoShrinkBlockingQueue(4, 0.2)
    for i in range(20):
        q.push(i)
    assert q.last_high_mark() == 20
    for _ in range(20):
        q.pop()
    for _ in range(8):
        q.try_pop()
    assert q.size() == 0
    assert q.last_high_mark() == 0


def test_shrink_high_mark_on_low_water():
    q = AutoShrinkBlockingQueue(3, 0.33)
    for i in range(12):
        q.push(i)
    assert q.last_high_mark() == 12
    for _ in range(9):
        q.pop()
    for _ in range(6):
        q.try_pop()
    assert q.last_high_mark() <= q.size()


def test_no_shrink_above_threshold():
    q = AutoShrinkBlockingQueue(2, 0.25)
    for i in range(10):
        q.push(i)
    q.pop()
    q.pop()
    assert q.size() == 8
    assert q.last_high_mark() == 10


def test_order_preserved_across_shrink():
    q = AutoShrinkBlockingQueue(1, 0.9)
    for i in range(10):
        q.push(i)
    assert [q.pop() for _ in range(10)] == list(range(10))
    assert q.last_high_mark() == 0


def test_high_mark_tracks_max():
    q = AutoShrinkBlockingQueue()
    assert q.last_high_mark() == 0
    q.push(1)
    q.push(2)
    q.push(3)
    assert q.last_high_mark() == 3
    q.pop()
    q.pop()
    q.push(4)
    assert q.last_high_mark() == 3
    q.push(5)
    assert q.last_high_mark() == 3
    q.push(6)
    assert q.last_high_mark() == 4


def test_empty_and_size_thread_safe():
    q = AutoShrinkBlockingQueue()
    running = threading.Event()
    running.set()
    counts = {"pushed": 0, "popped": 0}

    def writer():
        v = 0
        while running.is_set():
            q.push(v)
            v += 1
            counts["pushed"] += 1
            time.sleep(0.001)

    def reader():
        while running.is_set():
            if q.try_pop(_MISSING) is not _MISSING:
                counts["popped"] += 1
            time.sleep(0.001)

    w = threading.Thread(target=writer)
    r = threading.Thread(target=reader)
    w.start()
    r.start()
    for _ in range(32):
        q.empty()
        q.size()
        assert q.last_high_mark() >= 0
        time.sleep(0.001)
    running.clear()
    w.join()
    r.join()
    assert q.size() == counts["pushed"] - counts["popped"]
    assert q.last_high_mark() >= q.size()


def test_pop_push_alternating():
    q = AutoShrinkBlockingQueue()
    for i in range(8):
        q.push(i)
        assert q.pop() == i
    assert q.empty()
    assert len(q) == 0