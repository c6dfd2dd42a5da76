"""Executes a task graph: polls for ready tasks, runs their actions, reports completion."""

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

import structlog
from pydantic import BaseModel

from taskdag.models.action import ActionResult
from taskdag.models.task import Task, TaskStatus
from taskdag.utils.dag import TaskGraph

log = structlog.get_logger()


class ExecutionFailed(BaseModel):
    task_id: str
    cause: str


class RunReport(BaseModel):
    statuses: dict[str, TaskStatus] = {}
    failures: list[ExecutionFailed] = []
    # Tasks never dispatched because a dependency did not complete.
    blocked: list[str] = []

    @property
    def succeeded(self) -> bool:
        return not self.failures and not self.blocked


class Orchestrator:
    """Drives a TaskGraph to completion.

    All poll()/done() calls happen on the calling thread; only actions run in
    the worker pool. A failed task is not marked done, so its dependents are
    never dispatched while independent tasks keep running.
    """

    def __init__(self, graph: TaskGraph, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.graph = graph
        self.max_workers = max_workers

    def run(self) -> RunReport:
        """Run every reachable task and return what happened."""
        report = RunReport(statuses={task_id: TaskStatus.pending for task_id in self.graph.order})
        in_flight: dict[Future[ActionResult], Task] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            while True:
                while len(in_flight) < self.max_workers:
                    result = self.graph.poll()
                    if not result.is_ready:
                        break
                    task = result.task
                    report.statuses[task.id] = TaskStatus.in_progress
                    log.info("task_started", task_id=task.id, name=task.name)
                    in_flight[pool.submit(task.action.run)] = task

                if not in_flight:
                    break

                finished, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in finished:
                    task = in_flight.pop(future)
                    self._record(report, task, future)

        report.blocked = self.graph.order
        if report.blocked:
            log.warning("tasks_blocked", tasks=report.blocked)
        log.info(
            "run_finished",
            done=sum(1 for s in report.statuses.values() if s is TaskStatus.done),
            failed=len(report.failures),
            blocked=len(report.blocked),
        )
        return report

    def _record(self, report: RunReport, task: Task, future: Future[ActionResult]) -> None:
        try:
            outcome = future.result()
        except Exception as e:
            log.exception("task_crashed", task_id=task.id)
            outcome = ActionResult(ok=False, error=str(e))

        if outcome.ok:
            report.statuses[task.id] = TaskStatus.done
            self.graph.done(task.id)
            log.info("task_done", task_id=task.id)
            return

        report.statuses[task.id] = TaskStatus.failed
        report.failures.append(ExecutionFailed(task_id=task.id, cause=outcome.error))
        log.error("task_failed", task_id=task.id, cause=outcome.error)
