"""Loads a workspace and turns its projects into task graphs."""

from pathlib import Path

import structlog

from taskdag.errors import WorkspaceError
from taskdag.models.action import NoopAction, ShellAction
from taskdag.models.task import Task
from taskdag.models.workspace import Project, Workspace
from taskdag.utils.dag import GraphBuilder

log = structlog.get_logger()


def task_id_for(project: str, target: str) -> str:
    return f"{project}:{target}"


class WorkspaceService:
    """Answers questions about the projects of a single workspace."""

    def __init__(self, workspace: Workspace, projects: dict[str, Project]) -> None:
        self.workspace = workspace
        self.projects = projects

    @classmethod
    def load(cls, path: str | Path) -> "WorkspaceService":
        """Read the workspace file and every project it lists."""
        workspace = Workspace.read(path)
        projects = {
            name: Project.read(workspace.project_path(name), name=name)
            for name in workspace.projects
        }
        log.debug("workspace_loaded", workspace=workspace.name, projects=len(projects))
        return cls(workspace, projects)

    def affected_projects(self, name: str) -> list[str]:
        """Return every project affected by a change to ``name``.

        A project is affected when one of its ``affected_by_tags`` is among the
        ``affects_tags`` of an affected project, starting from ``name``. Each
        project appears once, in discovery order; ``name`` itself is excluded.
        """
        if name not in self.projects:
            raise WorkspaceError(f"Unknown project: {name}", details={"project": name})

        affected: list[str] = []
        seen = {name}
        pending = [name]
        while pending:
            tags = set(self.projects[pending.pop(0)].affects_tags)
            for other, project in self.projects.items():
                if other in seen or not tags.intersection(project.affected_by_tags):
                    continue
                seen.add(other)
                affected.append(other)
                pending.append(other)
        return affected

    def graph_builder(self, target: str, *, strict: bool = False) -> GraphBuilder:
        """Prepare a builder running ``target`` across the workspace.

        Every project defining ``target`` contributes one task per target in its
        ``depends_on`` chain. A project's target also waits for the same target
        of each project that directly affects it.
        """
        builder = GraphBuilder(strict=strict)

        for name, project in self.projects.items():
            if target not in project.targets:
                continue
            self._add_target_chain(builder, name, project, target, set())

            for other, upstream in self.projects.items():
                if other == name or target not in upstream.targets:
                    continue
                if set(upstream.affects_tags).intersection(project.affected_by_tags):
                    builder.add_dependency(task_id_for(name, target), task_id_for(other, target))

        return builder

    def _add_target_chain(
        self,
        builder: GraphBuilder,
        name: str,
        project: Project,
        target: str,
        added: set[str],
    ) -> None:
        if target in added:
            return
        added.add(target)

        definition = project.targets.get(target)
        if definition is None:
            raise WorkspaceError(
                f"{name}: unknown target {target!r}",
                details={"project": name, "target": target},
            )

        action = ShellAction(command=definition.command) if definition.command else NoopAction()
        task_id = task_id_for(name, target)
        builder.add_task(Task(id=task_id, name=task_id, action=action))

        for dependency in definition.depends_on:
            builder.add_dependency(task_id, task_id_for(name, dependency))
            self._add_target_chain(builder, name, project, dependency, added)
