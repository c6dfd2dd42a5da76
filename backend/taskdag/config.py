"""Configuration management for taskdag."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TASKDAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    workspace_file: Path = Field(
        default=Path("workspace.json"),
        description="Workspace description used when no path is given",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Actions run concurrently by the orchestrator (1 = sequential)",
    )
    strict_dependencies: bool = Field(
        default=False,
        description="Reject dependencies on tasks that were never added",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
