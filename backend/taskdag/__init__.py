"""taskdag — dependency-aware task scheduling.

Usage:
    from taskdag import GraphBuilder, Task, ShellAction

    builder = GraphBuilder()
    builder.add_task(Task(id="lib", name="lib", action=ShellAction(command=["make", "lib"])))
    builder.add_task(Task(id="app", name="app", action=ShellAction(command=["make", "app"])))
    builder.add_dependency("app", "lib")
    graph = builder.build()

    while (result := graph.poll()).is_ready:
        result.task.action.run()
        graph.done(result.task.id)
"""

from taskdag.errors import (
    BuilderConsumedError,
    CycleDetectedError,
    TaskDagError,
    UnknownTaskError,
    WorkspaceError,
)
from taskdag.models.action import Action, ActionResult, NoopAction, ShellAction
from taskdag.models.task import Task, TaskStatus
from taskdag.utils.dag import GraphBuilder, PollResult, PollStatus, TaskGraph

__all__ = [
    "Action",
    "ActionResult",
    "BuilderConsumedError",
    "CycleDetectedError",
    "GraphBuilder",
    "NoopAction",
    "PollResult",
    "PollStatus",
    "ShellAction",
    "Task",
    "TaskDagError",
    "TaskGraph",
    "TaskStatus",
    "UnknownTaskError",
    "WorkspaceError",
]
