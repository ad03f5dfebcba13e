"""
CompletionQueue — Worker results handed back to the owner

Implements the single-writer pattern:
- Workers put results into a thread-safe queue
- The owner drains the queue and is the only one to apply results
- Results come out in the order they arrived
"""

import queue
import threading
from dataclasses import dataclass
from typing import List

from .task import TaskResult


@dataclass
class QueueStats:
    """Statistics for queue observability."""
    results_received: int = 0
    results_processed: int = 0

    def to_dict(self) -> dict:
        return {
            "results_received": self.results_received,
            "results_processed": self.results_processed,
            "pending": self.results_received - self.results_processed
        }


class CompletionQueue:
    """
    Collects results from worker threads.

    Usage:
        completions = CompletionQueue()

        # Workers submit results
        completions.submit(result)

        # Owner applies them
        for result in completions.drain():
            apply(result)
    """

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()
        self._stats = QueueStats()
        self._lock = threading.Lock()

    def submit(self, result: TaskResult) -> None:
        """
        Submit a result from a worker.

        Thread-safe. Can be called from any thread.
        """
        with self._lock:
            self._stats.results_received += 1
        self._queue.put(result)

    def drain(self, timeout: float = 0.0) -> List[TaskResult]:
        """
        Take every result currently queued.

        Waits up to `timeout` seconds for the first one; never blocks
        after that.
        """
        results = []
        try:
            if timeout > 0:
                results.append(self._queue.get(timeout=timeout))
            while True:
                results.append(self._queue.get_nowait())
        except queue.Empty:
            pass

        self._mark_processed(len(results))
        return results

    def stats(self) -> QueueStats:
        with self._lock:
            return QueueStats(
                results_received=self._stats.results_received,
                results_processed=self._stats.results_processed
            )

    def _mark_processed(self, count: int) -> None:
        if count:
            with self._lock:
                self._stats.results_processed += count
