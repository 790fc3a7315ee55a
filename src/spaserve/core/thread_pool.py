"""
=============================================================================
WORKER THREAD POOL
=============================================================================

One task per client connection, executed by a bounded set of worker
threads fed from a bounded queue.

    accept loop ──submit()──►  ┌───────────────────┐
                               │  queue (bounded)  │──► Worker-0
                               │  [conn][conn]...  │──► Worker-1
                               └───────────────────┘──► Worker-N
                                       │
                                 full? submit() returns False,
                                 the server answers 503

Serving an SPA is I/O-bound (socket and file reads), so threads work
well despite the GIL: it is released while blocked on I/O.

Workers start at min_workers and grow on demand up to max_workers when
every worker is busy and work is queued.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A unit of work: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)


class Worker(threading.Thread):
    """
    A worker thread pulling tasks off the shared queue.

    A None task is the shutdown signal ("poison pill").
    """

    def __init__(
        self,
        task_queue: queue.Queue,
        worker_id: int,
        idle_timeout: float = 60.0
    ):
        super().__init__(name=f"spaserve-worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout
        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

    def run(self):
        logger.debug("Worker %d started", self.worker_id)

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug("Worker %d stopped", self.worker_id)

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.monotonic()

        try:
            task.func(*task.args, **task.kwargs)
        except Exception:
            # A failing connection must not take the worker down with it
            logger.exception(
                "Worker %d task failed after %.3fs", self.worker_id, time.monotonic() - start_time
            )
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Bounded, auto-growing thread pool.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16, max_queue_size=1000)
        pool.start()
        if not pool.submit(handle_connection, args=(conn,)):
            ...  # overloaded
        pool.shutdown()
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        max_queue_size: int = 1000,
        idle_timeout: float = 60.0
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = max_queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=max_queue_size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    def start(self):
        if self._started:
            return

        logger.info("Starting thread pool with %d workers", self.min_workers)
        self._shutdown = False
        for _ in range(self.min_workers):
            self._add_worker()
        self._started = True

    def _add_worker(self) -> Worker:
        with self._lock:
            if len(self._workers) >= self.max_workers:
                raise RuntimeError("Maximum workers reached")

            worker = Worker(
                task_queue=self._task_queue,
                worker_id=self._next_worker_id,
                idle_timeout=self.idle_timeout
            )
            self._next_worker_id += 1
            self._workers.append(worker)
            worker.start()
            return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = False,
        queue_timeout: Optional[float] = None
    ) -> bool:
        """
        Queue func(*args, **kwargs) for execution.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        with self._lock:
            can_grow = len(self._workers) < self.max_workers
            if not (self.busy_workers == len(self._workers) and can_grow and self.queued > 0):
                return
            logger.debug("Scaling up: %d -> %d workers", len(self._workers), len(self._workers) + 1)

        self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop all workers.

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound on the wait, in seconds.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.monotonic() + timeout if timeout else None
            while not self._task_queue.empty():
                if deadline is not None and time.monotonic() > deadline:
                    logger.warning("Shutdown timeout, forcing stop")
                    break
                time.sleep(0.1)

        for worker in self._workers:
            worker.shutdown()
        for _ in self._workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                break

        for worker in self._workers:
            worker.join(timeout=2.0)

        self._workers.clear()
        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def size(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def queued(self) -> int:
        return self._task_queue.qsize()
