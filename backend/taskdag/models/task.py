from enum import Enum

from pydantic import BaseModel, ConfigDict

from taskdag.models.action import Action


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    done = "done"
    failed = "failed"


class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    action: Action
