"""Task DAG utilities using graphlib.

``GraphBuilder`` collects tasks and dependency declarations and validates them
once in ``build()``. The resulting ``TaskGraph`` is a pull-based cursor: the
caller polls for a task that may run now, executes it, and reports it done.
The cursor never runs anything itself and never blocks.
"""

from enum import Enum
from graphlib import CycleError, TopologicalSorter
from heapq import heappop, heappush

import structlog
from pydantic import BaseModel, ConfigDict

from taskdag.errors import BuilderConsumedError, CycleDetectedError, UnknownTaskError
from taskdag.models.task import Task

log = structlog.get_logger()


class PollStatus(str, Enum):
    ready = "ready"
    not_ready = "not_ready"
    exhausted = "exhausted"


class PollResult(BaseModel):
    """Outcome of a single TaskGraph.poll() call."""

    model_config = ConfigDict(frozen=True)

    status: PollStatus
    task: Task | None = None

    @property
    def is_ready(self) -> bool:
        return self.status is PollStatus.ready


_NOT_READY = PollResult(status=PollStatus.not_ready)
_EXHAUSTED = PollResult(status=PollStatus.exhausted)


class GraphBuilder:
    """Accumulates tasks and dependencies, then builds a validated TaskGraph.

    ``a -> [b, c]`` means a depends on b and c, so both must be done first.
    With ``strict=True``, build() also rejects declarations naming tasks that
    were never added. A builder is single use: after ``build()`` every call raises
    ``BuilderConsumedError``.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._tasks: dict[str, Task] = {}
        self._edges: dict[str, list[str]] = {}
        self._strict = strict
        self._consumed = False

    def add_task(self, task: Task) -> None:
        """Add or replace a task. Tasks without dependencies still get an entry."""
        self._ensure_open()
        self._edges.setdefault(task.id, [])
        self._tasks[task.id] = task

    def add_dependency(self, task_id: str, dependency_id: str) -> None:
        """Declare that ``task_id`` cannot start before ``dependency_id`` is done.

        Neither id has to be registered yet; duplicates are harmless.
        """
        self._ensure_open()
        self._edges.setdefault(task_id, []).append(dependency_id)

    def build(self) -> "TaskGraph":
        """Validate the declarations and return the readiness cursor.

        Raises:
            CycleDetectedError: The dependencies cannot be linearized.
            UnknownTaskError: Strict mode only, a declaration names a task
                that was never added.
        """
        self._ensure_open()
        self._consumed = True

        self._check_unknown_ids()

        sorter = TopologicalSorter(self._edges)
        try:
            order = list(sorter.static_order())
        except CycleError as e:
            cycle = list(e.args[1])
            log.warning("cycle_detected", task_id=cycle[0], cycle=cycle)
            raise CycleDetectedError(cycle[0], cycle) from e

        # Unknown ids only reach this point in tolerant mode.
        order = [task_id for task_id in order if task_id in self._tasks]
        log.debug("graph_built", tasks=len(order))
        return TaskGraph(self._tasks, self._edges, order)

    def _check_unknown_ids(self) -> None:
        for task_id, dependencies in self._edges.items():
            if task_id not in self._tasks:
                if self._strict:
                    raise UnknownTaskError(task_id)
                log.warning("dependencies_for_unknown_task", task_id=task_id)
            for dependency_id in dependencies:
                if dependency_id in self._tasks:
                    continue
                if self._strict:
                    raise UnknownTaskError(dependency_id, referenced_by=task_id)
                log.warning(
                    "unknown_dependency", task_id=task_id, dependency_id=dependency_id
                )

    def _ensure_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError()


class TaskGraph:
    """Runtime cursor over a validated task DAG.

    Holds the dependency map, a completion set that only grows, and the
    working order computed at build time, which only shrinks as poll()
    dispatches tasks. Instances come from ``GraphBuilder.build()``.

    Not thread safe; executors running tasks in parallel must serialize
    their poll() and done() calls.
    """

    def __init__(
        self,
        tasks: dict[str, Task],
        edges: dict[str, list[str]],
        order: list[str],
    ) -> None:
        self._tasks = dict(tasks)
        self._edges = {task_id: list(deps) for task_id, deps in edges.items()}
        self._order = list(order)
        self._position = {task_id: i for i, task_id in enumerate(self._order)}
        self._dispatched: set[str] = set()
        self._done: set[str] = set()

        # Ready queue: unmet dependency counts plus a heap of order positions,
        # so poll() returns the earliest ready task without rescanning.
        self._unmet: dict[str, int] = {}
        self._dependents: dict[str, list[str]] = {}
        self._ready: list[int] = []
        for task_id in self._order:
            dependencies = set(self._edges.get(task_id, ()))
            self._unmet[task_id] = len(dependencies)
            for dependency_id in dependencies:
                self._dependents.setdefault(dependency_id, []).append(task_id)
            if not dependencies:
                heappush(self._ready, self._position[task_id])

    def poll(self) -> PollResult:
        """Dispatch the earliest task in build order whose dependencies are all done.

        The dispatched task leaves the working order whether or not it is later
        reported done. Returns ``not_ready`` when tasks remain but none can start,
        and ``exhausted`` once every task has been dispatched.
        """
        if self.remaining() == 0:
            return _EXHAUSTED
        if not self._ready:
            return _NOT_READY

        task_id = self._order[heappop(self._ready)]
        self._dispatched.add(task_id)
        log.debug("task_dispatched", task_id=task_id, remaining=self.remaining())
        task = self._tasks[task_id].model_copy(deep=True)
        return PollResult(status=PollStatus.ready, task=task)

    def done(self, task_id: str) -> None:
        """Record ``task_id`` as finished. Idempotent; any id is accepted."""
        if task_id in self._done:
            return
        if task_id not in self._dispatched:
            log.warning("done_for_undispatched_task", task_id=task_id)
        self._done.add(task_id)

        for dependent in self._dependents.get(task_id, ()):
            self._unmet[dependent] -= 1
            if self._unmet[dependent] == 0:
                heappush(self._ready, self._position[dependent])

    def remaining(self) -> int:
        """Number of tasks not yet dispatched by poll()."""
        return len(self._order) - len(self._dispatched)

    def ready_tasks(self) -> list[Task]:
        """Dispatch and return every task that is ready right now."""
        tasks = []
        while True:
            result = self.poll()
            if not result.is_ready:
                return tasks
            tasks.append(result.task)

    @property
    def is_exhausted(self) -> bool:
        return self.remaining() == 0

    @property
    def order(self) -> list[str]:
        """The working order: undispatched task ids, dependencies first."""
        return [task_id for task_id in self._order if task_id not in self._dispatched]

    @property
    def completed(self) -> frozenset[str]:
        return frozenset(self._done)

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def dependencies_of(self, task_id: str) -> list[str]:
        return list(self._edges.get(task_id, ()))
