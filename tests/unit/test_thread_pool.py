"""
Unit tests for the worker thread pool.
"""

import threading

import pytest

from spaserve.core import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=1, max_workers=2, max_queue_size=2, idle_timeout=0.1)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:
    """Tests for ThreadPool."""

    def test_runs_tasks(self, pool):
        done = threading.Event()
        results = []

        def task(value):
            results.append(value)
            done.set()

        assert pool.submit(task, args=(42,))
        assert done.wait(timeout=5.0)
        assert results == [42]

    def test_failing_task_does_not_kill_worker(self, pool):
        done = threading.Event()

        def broken():
            raise RuntimeError("boom")

        pool.submit(broken)
        pool.submit(done.set)

        assert done.wait(timeout=5.0)

    def test_full_queue_rejects(self):
        pool = ThreadPool(min_workers=1, max_workers=1, max_queue_size=1, idle_timeout=0.1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            assert pool.submit(blocker)
            assert started.wait(timeout=5.0)
            assert pool.submit(blocker)
            assert pool.submit(blocker) is False
            assert pool.queued == 1
            assert pool.busy_workers == 1
            assert pool.size == 1
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool().submit(print)

    def test_idle_pool(self, pool):
        assert pool.size == 1
        assert pool.busy_workers == 0
        assert pool.queued == 0
