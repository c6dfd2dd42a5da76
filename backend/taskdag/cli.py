"""taskdag command line interface.

Commands: validate, affected, order, run.
"""

from pathlib import Path
from typing import Annotated

import typer

from taskdag.config import get_settings
from taskdag.errors import CycleDetectedError, TaskDagError
from taskdag.logging_config import configure_logging
from taskdag.services.orchestrator import Orchestrator
from taskdag.services.validation import validate_projects
from taskdag.services.workspace_service import WorkspaceService

app = typer.Typer(
    name="taskdag",
    help="Dependency-aware task scheduling for workspaces",
    add_completion=False,
    no_args_is_help=True,
)

WorkspaceOption = Annotated[
    Path | None,
    typer.Option("--workspace", "-w", help="Workspace JSON file (default: TASKDAG_WORKSPACE_FILE)"),
]


def _workspace_path(workspace: Path | None) -> Path:
    return workspace or get_settings().workspace_file


def _load(workspace: Path | None) -> WorkspaceService:
    try:
        return WorkspaceService.load(_workspace_path(workspace))
    except TaskDagError as e:
        typer.echo(f"error: {e.message}", err=True)
        raise typer.Exit(1) from e


@app.callback()
def main(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    ] = None,
) -> None:
    configure_logging((log_level or get_settings().log_level).upper())


@app.command()
def validate(workspace: WorkspaceOption = None) -> None:
    """Check projects against the workspace's required targets and tags."""
    issues = validate_projects(_workspace_path(workspace))
    for issue in issues:
        typer.echo(str(issue))
    if issues:
        raise typer.Exit(1)
    typer.echo("workspace ok")


@app.command()
def affected(
    project: Annotated[str, typer.Argument(help="Project that changed")],
    workspace: WorkspaceOption = None,
) -> None:
    """List the projects affected by a change to PROJECT."""
    service = _load(workspace)
    try:
        names = service.affected_projects(project)
    except TaskDagError as e:
        typer.echo(f"error: {e.message}", err=True)
        raise typer.Exit(1) from e
    for name in names:
        typer.echo(name)


@app.command()
def order(
    target: Annotated[str, typer.Argument(help="Target to schedule, e.g. build")],
    workspace: WorkspaceOption = None,
) -> None:
    """Print the tasks for TARGET, dependencies first."""
    service = _load(workspace)
    try:
        graph = service.graph_builder(target, strict=get_settings().strict_dependencies).build()
    except CycleDetectedError as e:
        typer.echo(f"error: dependency cycle through {e.task_id}", err=True)
        raise typer.Exit(1) from e
    except TaskDagError as e:
        typer.echo(f"error: {e.message}", err=True)
        raise typer.Exit(1) from e
    for task_id in graph.order:
        typer.echo(task_id)


@app.command()
def run(
    target: Annotated[str, typer.Argument(help="Target to run, e.g. build")],
    workspace: WorkspaceOption = None,
    jobs: Annotated[
        int | None, typer.Option("--jobs", "-j", min=1, help="Tasks to run concurrently")
    ] = None,
) -> None:
    """Run TARGET across the workspace in dependency order."""
    settings = get_settings()
    service = _load(workspace)
    try:
        graph = service.graph_builder(target, strict=settings.strict_dependencies).build()
    except CycleDetectedError as e:
        typer.echo(f"error: dependency cycle through {e.task_id}", err=True)
        raise typer.Exit(1) from e
    except TaskDagError as e:
        typer.echo(f"error: {e.message}", err=True)
        raise typer.Exit(1) from e

    report = Orchestrator(graph, max_workers=jobs or settings.max_workers).run()

    for failure in report.failures:
        typer.echo(f"failed: {failure.task_id}: {failure.cause}")
    for task_id in report.blocked:
        typer.echo(f"blocked: {task_id}")
    if not report.succeeded:
        raise typer.Exit(1)
    typer.echo(f"{len(report.statuses)} tasks done")


if __name__ == "__main__":
    app()
