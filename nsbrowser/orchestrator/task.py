"""
Task — Unit of resolution work

Defines the core abstractions for the orchestrator:
- Task: one host call, tagged with its slot, target and generation
- TaskStatus: pending → done | failed | cancelled
- TaskResult: outcome of task execution, carried back to the owner

Design principles:
- Tasks are immutable after creation
- Tasks carry all context needed to decide, on completion, whether the
  result is still wanted (slot + generation)
- Results are plain data, serializable for logging and the CLI
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

import orjson
import xxhash

from ..core.model import Slot


class TaskStatus(Enum):
    """Task lifecycle states."""
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Task:
    """
    Unit of resolution work.

    Immutable after creation. Carries all context needed for execution.
    """
    # Identity
    id: str = field(default_factory=lambda: _generate_task_id())

    # Routing
    slot: Slot = Slot.DOC
    target: str = ""
    generation: int = 0

    # Execution
    fn: Callable = field(default=None)
    args: tuple = field(default_factory=tuple)
    kwargs: Dict[str, Any] = field(default_factory=dict)

    # Limits
    timeout: float = 30.0  # seconds

    # Metadata (for observability)
    name: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, Task):
            return self.id == other.id
        return False


@dataclass
class TaskResult:
    """Outcome of task execution."""
    task_id: str
    status: TaskStatus
    slot: Slot = Slot.DOC
    target: str = ""
    generation: int = 0
    result: Any = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    # Timing
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    duration_ms: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.DONE

    @property
    def failed(self) -> bool:
        return self.status == TaskStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging and JSON output."""
        return {
            "task_id": self.task_id,
            "status": self.status.value,
            "slot": self.slot.value,
            "target": self.target,
            "generation": self.generation,
            "result": self.result if _is_serializable(self.result) else str(self.result),
            "error": self.error,
            "error_kind": self.error_kind,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def for_task(cls, task: Task, status: TaskStatus, **kwargs) -> 'TaskResult':
        """Result stamped with the task's identity and routing."""
        return cls(
            task_id=task.id,
            status=status,
            slot=task.slot,
            target=task.target,
            generation=task.generation,
            **kwargs
        )


_task_counter = itertools.count()


def _generate_task_id() -> str:
    """Generate unique task ID using xxhash (5x faster than hashlib)."""
    seed = f"{datetime.now(timezone.utc).isoformat()}:{next(_task_counter)}"
    return xxhash.xxh64(seed.encode()).hexdigest()[:12]


def _is_serializable(obj: Any) -> bool:
    try:
        orjson.dumps(obj)
        return True
    except (TypeError, orjson.JSONEncodeError):
        return False


def resolution_task(
    fn: Callable,
    slot: Slot,
    target: str,
    generation: int,
    args: tuple = (),
    kwargs: Dict[str, Any] = None,
    timeout: float = 30.0,
    name: str = ""
) -> Task:
    """
    Create a task for one resolution slot.

    Args:
        fn: Host call to execute
        slot: Slot the task occupies (REQUIRE or DOC)
        target: Namespace or qualified member name
        generation: Coordinator generation the request was issued under
        args: Positional arguments tuple for fn
        kwargs: Keyword arguments dict for fn
        timeout: Seconds before the task is reported as failed
        name: Optional task name for observability

    Example:
        task = resolution_task(fn=host.require_namespace, slot=Slot.REQUIRE,
                               target="beta", generation=3, args=("beta",))
    """
    return Task(
        slot=slot,
        target=target,
        generation=generation,
        fn=fn,
        args=args,
        kwargs=kwargs or {},
        timeout=timeout,
        name=name or f"{slot.value}:{target}",
    )
