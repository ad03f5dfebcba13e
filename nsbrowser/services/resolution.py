"""
Resolution Service — Requiring namespaces and resolving documentation

Runs the expensive host calls in the background and keeps one in-flight
task per slot:
- REQUIRE slot: load an unloaded namespace
- DOC slot: fetch a documentation facet for the selected member

A new request for a slot cancels the pending one. Cancellation is
cooperative: a cancelled task may still finish on its worker, but its
result is dropped when drained. A task still pending past its deadline
is reported as failed with a Timeout error instead of staying pending.

Results are drained by the owner, in arrival order, and carry the
generation they were requested under so the owner can tell whether they
are still wanted.
"""

import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from ..core.errors import TIMEOUT, NotFound
from ..core.model import DocFacet, Member, Slot
from ..core.selection import DocRequest, RequireRequest
from ..orchestrator import Task, TaskOrchestrator, TaskResult, TaskStatus, resolution_task
from .host import HostProvider

log = logging.getLogger(__name__)


class OutcomeState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class SlotOutcome:
    """Latest applied state of one slot, as shown to the user."""
    state: OutcomeState = OutcomeState.IDLE
    target: str = ""
    text: str = ""
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> 'SlotOutcome':
        return cls()

    @classmethod
    def pending(cls, target: str) -> 'SlotOutcome':
        return cls(state=OutcomeState.PENDING, target=target)

    @classmethod
    def ok(cls, target: str, text: str = "") -> 'SlotOutcome':
        return cls(state=OutcomeState.OK, target=target, text=text)

    @classmethod
    def failed(cls, target: str, error: str) -> 'SlotOutcome':
        return cls(state=OutcomeState.ERROR, target=target, error=error)

    @property
    def is_pending(self) -> bool:
        return self.state == OutcomeState.PENDING

    def label(self) -> str:
        """"ok", "pending", "error(NotFound)" ..."""
        if self.state == OutcomeState.ERROR:
            return f"error({self.error})"
        return self.state.value


@dataclass
class ResolutionTask:
    """One in-flight resolution, owned by the service."""
    task: Task
    future: Future
    deadline: float
    status: TaskStatus = TaskStatus.PENDING

    @property
    def slot(self) -> Slot:
        return self.task.slot

    @property
    def target(self) -> str:
        return self.task.target

    @property
    def generation(self) -> int:
        return self.task.generation


class ResolutionService:
    """
    Background require and doc resolution with per-slot cancellation.

    Usage:
        service = ResolutionService(host, TaskOrchestrator())
        service.resolve_doc(member, DocFacet.SOURCE, generation=5)
        ...
        for result in service.drain(timeout=0.1):
            if coordinator.is_current(result.slot, result.generation):
                apply(result)
    """

    def __init__(
        self,
        host: HostProvider,
        orchestrator: Optional[TaskOrchestrator] = None,
        timeout: Optional[float] = None,
    ):
        self._host = host
        self._orchestrator = orchestrator or TaskOrchestrator()
        self._timeout = timeout if timeout is not None else self._orchestrator.config.task_timeout
        self._slots: Dict[Slot, ResolutionTask] = {}
        self._tasks: Dict[str, ResolutionTask] = {}

    @property
    def orchestrator(self) -> TaskOrchestrator:
        return self._orchestrator

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def submit(self, request) -> ResolutionTask:
        """Submit a coordinator request (RequireRequest or DocRequest)."""
        if isinstance(request, RequireRequest):
            return self.require(request.namespace, request.generation)
        if isinstance(request, DocRequest):
            return self.resolve_doc(request.member, request.facet, request.generation)
        raise TypeError(f"Not a resolution request: {request!r}")

    def require(self, namespace: str, generation: int) -> ResolutionTask:
        """Load a namespace in the background on the REQUIRE slot."""
        task = resolution_task(
            fn=self._host.require_namespace,
            slot=Slot.REQUIRE,
            target=namespace,
            generation=generation,
            args=(namespace,),
            timeout=self._timeout,
        )
        return self._start(task)

    def resolve_doc(self, member: Member, facet: DocFacet, generation: int) -> ResolutionTask:
        """Fetch one documentation facet in the background on the DOC slot."""
        task = resolution_task(
            fn=self._fetch_doc,
            slot=Slot.DOC,
            target=member.qualified_name,
            generation=generation,
            args=(member, DocFacet.parse(facet)),
            timeout=self._timeout,
            name=f"doc:{member.qualified_name}:{DocFacet.parse(facet).label}",
        )
        return self._start(task)

    def in_flight(self, slot: Slot) -> Optional[ResolutionTask]:
        return self._slots.get(slot)

    def cancel(self, slot: Slot) -> Optional[ResolutionTask]:
        """Cancel the pending task on a slot, if any."""
        current = self._slots.pop(slot, None)
        if current is not None and current.status == TaskStatus.PENDING:
            current.status = TaskStatus.CANCELLED
            self._tasks.pop(current.task.id, None)
            current.future.cancel()
            log.debug("Cancelled %s", current.task.name)
        return current

    # -------------------------------------------------------------------------
    # Completions
    # -------------------------------------------------------------------------

    def drain(self, timeout: float = 0.0) -> List[TaskResult]:
        """
        Completed results for the tasks currently owning their slots.

        Results of cancelled or timed-out tasks are dropped. Tasks past
        their deadline are reported as failed Timeout results.
        """
        results = []
        for result in self._orchestrator.drain(timeout=timeout):
            accepted = self._settle(result)
            if accepted is not None:
                results.append(accepted)
        results.extend(self._expire())
        return results

    def wait_idle(self, timeout: float = 5.0) -> List[TaskResult]:
        """Drain until no slot has a pending task, or until timeout."""
        deadline = time.monotonic() + timeout
        results = self.drain()
        while self._slots:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            results.extend(self.drain(timeout=min(remaining, 0.05)))
        return results

    def shutdown(self, wait: bool = False) -> bool:
        """Cancel every slot, then stop the orchestrator (see TaskOrchestrator.shutdown)."""
        for slot in list(self._slots):
            self.cancel(slot)
        return self._orchestrator.shutdown(wait=wait)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _start(self, task: Task) -> ResolutionTask:
        self.cancel(task.slot)
        deadline = time.monotonic() + task.timeout
        # Register before submitting: inline execution completes immediately
        entry = ResolutionTask(task=task, future=Future(), deadline=deadline)
        self._slots[task.slot] = entry
        self._tasks[task.id] = entry
        entry.future = self._orchestrator.submit(task)
        log.debug("Started %s (generation %d)", task.name, task.generation)
        return entry

    def _settle(self, result: TaskResult) -> Optional[TaskResult]:
        entry = self._tasks.pop(result.task_id, None)
        if entry is None:
            log.debug("Dropped result of abandoned task %s", result.task_id)
            return None

        entry.status = result.status
        if self._slots.get(entry.slot) is entry:
            del self._slots[entry.slot]
        return result

    def _expire(self) -> List[TaskResult]:
        now = time.monotonic()
        expired = []
        for slot, entry in list(self._slots.items()):
            if entry.status == TaskStatus.PENDING and now >= entry.deadline:
                entry.status = TaskStatus.FAILED
                entry.future.cancel()
                del self._slots[slot]
                self._tasks.pop(entry.task.id, None)
                log.warning("%s timed out after %.1fs", entry.task.name, entry.task.timeout)
                expired.append(TaskResult.for_task(
                    entry.task,
                    TaskStatus.FAILED,
                    error=f"Timed out after {entry.task.timeout}s",
                    error_kind=TIMEOUT,
                    completed_at=datetime.now(timezone.utc).isoformat(),
                ))
        return expired

    def _fetch_doc(self, member: Member, facet: DocFacet) -> str:
        """Worker-side doc fetch; ALL joins every facet the host has."""
        if facet is not DocFacet.ALL:
            return self._host.fetch_doc(member, facet)

        sections = []
        for single in DocFacet.individual():
            try:
                text = self._host.fetch_doc(member, single)
            except NotFound:
                continue
            sections.append(f"--- {single.label} ---\n{text}")
        if not sections:
            raise NotFound(f"No documentation for {member.qualified_name}", target=member.qualified_name)
        return "\n\n".join(sections)
