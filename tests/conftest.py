"""Shared fixtures for taskdag tests."""

import json

import pytest
import structlog

from taskdag.config import get_settings


@pytest.fixture(autouse=True)
def reset_state():
    """Keep logging and settings configuration from leaking between tests."""
    get_settings.cache_clear()
    yield
    structlog.reset_defaults()
    get_settings.cache_clear()


@pytest.fixture
def write_workspace(tmp_path):
    """Write a workspace file plus one JSON file per project, return its path."""

    def _write(projects: dict, **workspace_fields) -> str:
        (tmp_path / "projects").mkdir(exist_ok=True)
        paths = {}
        for name, data in projects.items():
            path = tmp_path / "projects" / f"{name}.json"
            if isinstance(data, bytes):
                path.write_bytes(data)
            elif isinstance(data, str):
                path.write_text(data)
            else:
                path.write_text(json.dumps({"name": name, **data}))
            paths[name] = f"projects/{name}.json"

        workspace = {
            "name": "demo",
            "app_version": "1.0.0",
            "projects": paths,
            "tags": ["core", "web"],
            "maintainers": ["ops"],
            "repository": "https://example.com/demo.git",
            "required_targets": [],
            **workspace_fields,
        }
        workspace_path = tmp_path / "workspace.json"
        workspace_path.write_text(json.dumps(workspace))
        return str(workspace_path)

    return _write
