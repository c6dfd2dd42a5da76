from enum import Enum
from pathlib import Path

from pydantic import BaseModel, PrivateAttr, ValidationError

from taskdag.errors import ProjectSerializationError, WorkspaceSerializationError


class Target(BaseModel):
    command: list[str] = []
    # Other targets of the same project that must finish first.
    depends_on: list[str] = []


class Project(BaseModel):
    name: str
    version: str | None = None
    description: str = ""
    owners: list[str] = []
    affects_tags: list[str] = []
    affected_by_tags: list[str] = []
    targets: dict[str, Target] = {}

    @classmethod
    def read(cls, path: str | Path, name: str | None = None) -> "Project":
        """Read a project description from a JSON file."""
        try:
            return cls.model_validate_json(Path(path).read_bytes())
        except (OSError, ValidationError) as e:
            raise ProjectSerializationError(name or str(path), str(path)) from e


class Workspace(BaseModel):
    name: str
    app_version: str = ""
    # Project name -> path of its JSON description.
    projects: dict[str, str] = {}
    tags: list[str] = []
    maintainers: list[str] = []
    repository: str = ""
    required_targets: list[str] = []

    _root: Path = PrivateAttr(default_factory=Path.cwd)

    @classmethod
    def read(cls, path: str | Path) -> "Workspace":
        """Read a workspace description from a JSON file.

        Relative project paths resolve against the file's directory.
        """
        path = Path(path)
        try:
            workspace = cls.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            raise WorkspaceSerializationError(str(path)) from e
        workspace._root = path.parent
        return workspace

    def project_path(self, name: str) -> Path:
        return self._root / self.projects[name]


class IssueKind(str, Enum):
    workspace_serialization = "workspace_serialization"
    project_serialization = "project_serialization"
    missing_target = "missing_target"
    unknown_tags = "unknown_tags"


class ValidationIssue(BaseModel):
    kind: IssueKind
    project: str = ""
    target: str = ""
    tags: list[str] = []

    def __str__(self) -> str:
        if self.kind is IssueKind.workspace_serialization:
            return "workspace could not be read"
        if self.kind is IssueKind.project_serialization:
            return f"{self.project}: project could not be read"
        if self.kind is IssueKind.missing_target:
            return f"{self.project}: missing required target {self.target!r}"
        return f"{self.project}: unknown tags {', '.join(self.tags)}"
