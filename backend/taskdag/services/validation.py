"""Validation of workspace projects against workspace policy."""

from pathlib import Path

import structlog

from taskdag.errors import ProjectSerializationError, WorkspaceSerializationError
from taskdag.models.workspace import IssueKind, Project, ValidationIssue, Workspace

log = structlog.get_logger()


def validate_projects(workspace_path: str | Path) -> list[ValidationIssue]:
    """Check every project of the workspace and return the problems found.

    Reports unreadable workspace or project files, required targets a project
    does not define, and tags that the workspace does not declare. Never raises
    for bad input; an empty list means the workspace is valid.
    """
    try:
        workspace = Workspace.read(workspace_path)
    except WorkspaceSerializationError:
        log.warning("workspace_unreadable", path=str(workspace_path))
        return [ValidationIssue(kind=IssueKind.workspace_serialization)]

    issues: list[ValidationIssue] = []
    known_tags = set(workspace.tags)

    for name in workspace.projects:
        try:
            project = Project.read(workspace.project_path(name), name=name)
        except ProjectSerializationError:
            issues.append(ValidationIssue(kind=IssueKind.project_serialization, project=name))
            continue

        for target in workspace.required_targets:
            if target not in project.targets:
                issues.append(
                    ValidationIssue(kind=IssueKind.missing_target, project=name, target=target)
                )

        unknown = [
            tag
            for tag in [*project.affects_tags, *project.affected_by_tags]
            if tag not in known_tags
        ]
        if unknown:
            issues.append(ValidationIssue(kind=IssueKind.unknown_tags, project=name, tags=unknown))

    log.info("workspace_validated", workspace=workspace.name, issues=len(issues))
    return issues
