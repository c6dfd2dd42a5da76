"""Custom exceptions for taskdag."""


class TaskDagError(Exception):
    """Base exception for all taskdag errors."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CycleDetectedError(TaskDagError):
    """Raised by GraphBuilder.build when the dependency declarations contain a cycle.

    ``task_id`` is one member of some cycle, not a complete description of it.
    """

    def __init__(self, task_id: str, cycle: list[str] | None = None) -> None:
        super().__init__(
            f"Cycle detected at task: {task_id}",
            details={"task_id": task_id, "cycle": list(cycle or [])},
        )
        self.task_id = task_id


class UnknownTaskError(TaskDagError):
    """Raised by a strict build when a dependency declaration names an unregistered task.

    ``referenced_by`` is the dependent task when the unknown id was declared as a
    dependency, and None when dependencies were declared for the unknown id itself.
    """

    def __init__(self, task_id: str, referenced_by: str | None = None) -> None:
        if referenced_by is None:
            message = f"Dependencies declared for unknown task {task_id!r}"
        else:
            message = f"Unknown task {task_id!r} required by {referenced_by!r}"
        super().__init__(
            message,
            details={"task_id": task_id, "referenced_by": referenced_by},
        )
        self.task_id = task_id
        self.referenced_by = referenced_by


class BuilderConsumedError(TaskDagError):
    """Raised when a GraphBuilder is used after build()."""

    def __init__(self) -> None:
        super().__init__("GraphBuilder has already been built")


class WorkspaceError(TaskDagError):
    """Raised when workspace or project data cannot be used."""


class WorkspaceSerializationError(WorkspaceError):
    """Raised when the workspace file cannot be read or parsed."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Could not read workspace: {path}", details={"path": path})
        self.path = path


class ProjectSerializationError(WorkspaceError):
    """Raised when a project file cannot be read or parsed."""

    def __init__(self, name: str, path: str) -> None:
        super().__init__(
            f"Could not read project {name!r}: {path}",
            details={"project": name, "path": path},
        )
        self.name = name
        self.path = path
