"""
WorkerPool — Thread pool for host calls

Host calls (requiring a namespace, fetching documentation) block on the
host environment, so they run on threads while the owner stays
responsive.

Design principles:
- A task never raises out of the pool: failures become FAILED results
  classified by error kind
- Pool statistics are kept for observability
- Callers are notified through a completion callback, never by polling
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from ..core.errors import error_kind
from .config import OrchestratorConfig
from .task import Task, TaskResult, TaskStatus

log = logging.getLogger(__name__)


@dataclass
class PoolStats:
    """Statistics for pool observability."""
    active_tasks: int = 0
    completed_tasks: int = 0
    failed_tasks: int = 0
    total_duration_ms: float = 0.0

    @property
    def avg_duration_ms(self) -> float:
        if self.completed_tasks == 0:
            return 0.0
        return self.total_duration_ms / self.completed_tasks

    def to_dict(self) -> dict:
        return {
            "active_tasks": self.active_tasks,
            "completed_tasks": self.completed_tasks,
            "failed_tasks": self.failed_tasks,
            "avg_duration_ms": round(self.avg_duration_ms, 2)
        }


class WorkerPool:
    """
    ThreadPool for host calls.

    Uses threads because host calls wait on I/O or on another runtime,
    not on Python bytecode.
    """

    def __init__(self, config: OrchestratorConfig):
        self._config = config
        self._executor = ThreadPoolExecutor(
            max_workers=config.workers,
            thread_name_prefix="nsbrowser-resolve-"
        )
        self._stats = PoolStats()
        self._lock = threading.Lock()
        self._shutdown = False
        self._running: Set[Future] = set()

    def submit(self, task: Task, on_done: Optional[Callable[[TaskResult], None]] = None) -> Future:
        """
        Submit a task for execution.

        Returns a Future resolving to a TaskResult. on_done, if given, is
        called with the result from the worker thread.
        """
        if self._shutdown:
            raise RuntimeError("Pool is shut down")

        with self._lock:
            self._stats.active_tasks += 1

        future = self._executor.submit(execute_task, task)
        with self._lock:
            self._running.add(future)
        future.add_done_callback(lambda f: self._on_complete(f, on_done))
        return future

    def _on_complete(self, future: Future, on_done: Optional[Callable[[TaskResult], None]]) -> None:
        """Callback when task completes."""
        if future.cancelled():
            with self._lock:
                self._stats.active_tasks -= 1
                self._running.discard(future)
            return

        result = future.result()
        with self._lock:
            self._stats.active_tasks -= 1
            self._running.discard(future)
            if result.success:
                self._stats.completed_tasks += 1
                self._stats.total_duration_ms += result.duration_ms or 0
            else:
                self._stats.failed_tasks += 1

        if on_done is not None:
            on_done(result)

    def stats(self) -> PoolStats:
        """Get pool statistics."""
        with self._lock:
            return PoolStats(
                active_tasks=self._stats.active_tasks,
                completed_tasks=self._stats.completed_tasks,
                failed_tasks=self._stats.failed_tasks,
                total_duration_ms=self._stats.total_duration_ms
            )

    def shutdown(self, wait: bool = True) -> bool:
        """
        Shutdown the pool, dropping tasks that have not started.

        With wait, blocks for running host calls at most
        config.shutdown_timeout seconds; a call still running after that
        is left to finish on its own thread.

        Returns:
            True if no host call was still running when this returned
        """
        self._shutdown = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        with self._lock:
            running = set(self._running)
        if not running:
            return True
        if not wait:
            return False

        _, not_done = wait_futures(running, timeout=self._config.shutdown_timeout)
        if not_done:
            log.warning(
                "%d host call(s) still running after %.1fs shutdown timeout",
                len(not_done), self._config.shutdown_timeout,
            )
        return not not_done


def execute_task(task: Task) -> TaskResult:
    """Run a task, turning any exception into a FAILED result."""
    started_at = datetime.now(timezone.utc)

    try:
        result = task.fn(*task.args, **task.kwargs)

        completed_at = datetime.now(timezone.utc)
        duration_ms = (completed_at - started_at).total_seconds() * 1000

        return TaskResult.for_task(
            task,
            TaskStatus.DONE,
            result=result,
            started_at=started_at.isoformat(),
            completed_at=completed_at.isoformat(),
            duration_ms=duration_ms
        )

    except Exception as e:
        completed_at = datetime.now(timezone.utc)
        duration_ms = (completed_at - started_at).total_seconds() * 1000
        kind = error_kind(e)
        log.warning("Task %s failed (%s): %s", task.name, kind, e)

        return TaskResult.for_task(
            task,
            TaskStatus.FAILED,
            error=str(e),
            error_kind=kind,
            started_at=started_at.isoformat(),
            completed_at=completed_at.isoformat(),
            duration_ms=duration_ms
        )
