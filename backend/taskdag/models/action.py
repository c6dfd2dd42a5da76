"""Actions a task can perform when executed."""

import subprocess
from typing import Annotated, Literal, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

log = structlog.get_logger()


class ActionResult(BaseModel):
    """Outcome of running an action."""

    ok: bool
    exit_code: int | None = None
    error: str = ""


class ShellAction(BaseModel):
    """Run an external command. Element 0 is the executable."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["shell"] = "shell"
    command: list[str] = Field(min_length=1)

    def run(self) -> ActionResult:
        """Spawn the command and block until it exits.

        Output is inherited from the calling process. Spawn and wait failures
        are reported in the result instead of raised.
        """
        # TODO: accept an environment mapping once the workspace format carries one
        executable, *args = self.command
        try:
            completed = subprocess.run([executable, *args], check=False)
        except (OSError, ValueError) as e:
            log.warning("shell_spawn_failed", executable=executable, error=str(e))
            return ActionResult(ok=False, error=f"failed to execute {executable}: {e}")
        if completed.returncode != 0:
            return ActionResult(
                ok=False,
                exit_code=completed.returncode,
                error=f"{executable} exited with code {completed.returncode}",
            )
        return ActionResult(ok=True, exit_code=0)


class NoopAction(BaseModel):
    """Does nothing. Useful for tasks that only group dependencies."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["noop"] = "noop"

    def run(self) -> ActionResult:
        return ActionResult(ok=True)


Action = Annotated[Union[ShellAction, NoopAction], Field(discriminator="kind")]
