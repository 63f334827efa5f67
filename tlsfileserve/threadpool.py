"""A fixed-size pool of worker threads fed from a shared task queue."""

from __future__ import annotations

import threading
import traceback
from collections import deque
from typing import Callable


class ThreadPool:
    """Run submitted callables on a fixed number of worker threads.

    When the pool shuts down, the workers finish every task still queued,
    then exit.
    """

    def __init__(self, threads: int) -> None:
        self._tasks: deque[Callable[[], object]] = deque()
        self._condition = threading.Condition()
        self._stopped = False
        self._workers = [
            threading.Thread(target=self._work, name=f"pool-worker-{n}", daemon=True)
            for n in range(threads)
        ]
        for worker in self._workers:
            worker.start()

    def _work(self) -> None:
        while True:
            with self._condition:
                self._condition.wait_for(lambda: self._stopped or self._tasks)
                if self._stopped and not self._tasks:
                    return
                task = self._tasks.popleft()
            try:
                task()
            except Exception:
                traceback.print_exc()

    def enqueue(self, task: Callable[[], object]) -> None:
        """Queue a callable; raise RuntimeError once the pool is stopped."""
        with self._condition:
            if self._stopped:
                raise RuntimeError("enqueue on stopped ThreadPool")
            self._tasks.append(task)
            self._condition.notify()

    def shutdown(self) -> None:
        """Stop accepting tasks, drain the queue and join the workers."""
        with self._condition:
            self._stopped = True
            self._condition.notify_all()
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()