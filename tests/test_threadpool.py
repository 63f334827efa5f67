import threading

import pytest

from tlsfileserve.threadpool import ThreadPool


def test_tasks_run_on_workers():
    done = threading.Event()
    results = []
    with ThreadPool(2) as pool:
        pool.enqueue(lambda: (results.append("ran"), done.set()))
        assert done.wait(5)
    assert results == ["ran"]


def test_shutdown_drains_queued_tasks():
    results = []
    pool = ThreadPool(4)
    for value in range(50):
        pool.enqueue(lambda v=value: results.append(v))
    pool.shutdown()
    assert len(results) == 50
    assert sorted(results) == list(range(50))


def test_single_worker_preserves_order():
    results = []
    pool = ThreadPool(1)
    for value in range(20):
        pool.enqueue(lambda v=value: results.append(v))
    pool.shutdown()
    assert results == list(range(20))


def test_enqueue_after_shutdown_raises():
    pool = ThreadPool(2)
    pool.shutdown()
    with pytest.raises(RuntimeError, match="enqueue on stopped ThreadPool"):
        pool.enqueue(lambda: None)


def test_context_manager_stops_pool():
    with ThreadPool(1) as pool:
        pass
    with pytest.raises(RuntimeError):
        pool.enqueue(lambda: None)


def test_failing_task_does_not_kill_worker():
    done = threading.Event()

    def boom():
        raise ValueError("bad task")

    with ThreadPool(1) as pool:
        pool.enqueue(boom)
        pool.enqueue(done.set)
        assert done.wait(5)


def test_tasks_run_concurrently():
    barrier = threading.Barrier(3, timeout=5)
    passed = []
    with ThreadPool(3) as pool:
        for _ in range(3):
            pool.enqueue(lambda: passed.append(barrier.wait()))
    assert sorted(passed) == [0, 1, 2]