"""
Task Orchestrator — Background execution for host calls

Runs host calls off the owner's thread and hands results back through a
completion queue, so only the owner ever mutates browser state.

Usage:
    from nsbrowser.orchestrator import TaskOrchestrator, resolution_task
    from nsbrowser.core import Slot

    orchestrator = TaskOrchestrator()
    task = resolution_task(fn=host.fetch_doc, slot=Slot.DOC,
                           target="alpha/foo", generation=7,
                           args=(member, facet))
    orchestrator.submit(task)

    # Later, on the owner's thread
    for result in orchestrator.drain(timeout=0.1):
        apply(result)

    # Graceful shutdown
    orchestrator.shutdown()

Configuration via environment variables:
    NSB_PARALLEL_ENABLED=true    # false runs tasks inline
    NSB_RESOLVE_WORKERS=4        # Thread pool size
    NSB_RESOLVE_TIMEOUT=30       # Resolution deadline (seconds)
    NSB_SHUTDOWN_TIMEOUT=5       # Longest wait for running calls on shutdown
"""

import threading
from concurrent.futures import Future
from typing import Any, Dict, List, Optional

from .task import Task, TaskStatus, TaskResult, resolution_task
from .config import OrchestratorConfig
from .pools import WorkerPool, PoolStats, execute_task
from .aggregator import CompletionQueue


class TaskOrchestrator:
    """
    Central coordinator for background task execution.

    Manages:
    - A thread pool for host calls
    - The completion queue results are delivered through
    - Sequential fallback when parallelism is disabled

    Thread Safety:
    - submit/drain/shutdown are safe from any thread
    - Results are only ever applied by whoever drains
    """

    def __init__(self, config: Optional[OrchestratorConfig] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Configuration. If None, loads from environment.
        """
        self._config = config or OrchestratorConfig.from_env()
        self._config.validate()

        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

        self._pool: Optional[WorkerPool] = None
        self._completions = CompletionQueue()

    def _ensure_started(self) -> None:
        """Lazily create the pool on first use."""
        if self._started:
            return

        with self._lock:
            if self._started:
                return
            if self._config.enabled:
                self._pool = WorkerPool(self._config)
            self._started = True

    @property
    def enabled(self) -> bool:
        """Check if background execution is enabled."""
        return self._config.enabled

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    def submit(self, task: Task) -> Future:
        """
        Submit a task for execution.

        Its result is delivered to the completion queue in every mode.

        Returns:
            Future that resolves to TaskResult

        Raises:
            RuntimeError: If orchestrator is shut down
        """
        self._ensure_started()

        if self._shutdown:
            raise RuntimeError("Orchestrator is shut down")

        if not self._config.enabled:
            return self._execute_sequential(task)

        return self._pool.submit(task, on_done=self._completions.submit)

    def drain(self, timeout: float = 0.0) -> List[TaskResult]:
        """Completed results in arrival order (see CompletionQueue.drain)."""
        return self._completions.drain(timeout=timeout)

    def get_metrics(self) -> Dict[str, Any]:
        """Pool and queue statistics."""
        summary: Dict[str, Any] = {
            "enabled": self._config.enabled,
            "config": self._config.to_dict(),
            "completions": self._completions.stats().to_dict(),
        }
        if self._pool:
            summary["pool"] = self._pool.stats().to_dict()
        return summary

    def shutdown(self, wait: bool = True) -> bool:
        """
        Shutdown the orchestrator. Idempotent.

        With wait, running host calls get up to config.shutdown_timeout
        seconds to finish. Returns True if none was left running.
        """
        with self._lock:
            if self._shutdown:
                return True
            self._shutdown = True
            if self._pool:
                return self._pool.shutdown(wait=wait)
            return True

    def _execute_sequential(self, task: Task) -> Future:
        """
        Execute task inline (fallback mode).

        Returns a completed Future for API compatibility.
        """
        future = Future()
        result = execute_task(task)
        future.set_result(result)
        self._completions.submit(result)
        return future


__all__ = [
    # Main class
    "TaskOrchestrator",

    # Task types
    "Task",
    "TaskStatus",
    "TaskResult",
    "resolution_task",

    # Configuration
    "OrchestratorConfig",

    # Components
    "WorkerPool",
    "PoolStats",
    "CompletionQueue",
]
