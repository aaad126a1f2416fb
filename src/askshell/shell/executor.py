"""Run shell commands and change the working directory of this process."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from askshell.paths import expand_home
from askshell.runtime_logging import get_runtime_logger


@dataclass(slots=True)
class ExecutionResult:
    command: str
    stdout: str
    stderr: str
    returncode: int
    error: str | None = None

    @property
    def combined_output(self) -> str:
        return self.stdout + self.stderr


class CommandExecutor:
    """Runs commands through ``sh -c`` in the current working directory.

    A non-zero exit is not an error here: the caller gets whatever output was
    captured and decides what to show.
    """

    def __init__(self, shell_program: str = "sh") -> None:
        self.shell_program = shell_program

    def execute(self, command: str) -> ExecutionResult:
        logger = get_runtime_logger()
        try:
            proc = subprocess.run(
                [self.shell_program, "-c", command],
                cwd=os.getcwd(),
                text=True,
                capture_output=True,
                errors="replace",
            )
        except OSError as exc:
            logger.warning("executor.spawn_failed", command=command, error=str(exc))
            return ExecutionResult(
                command=command,
                stdout="",
                stderr=f"{exc}\n",
                returncode=-1,
                error=str(exc),
            )

        logger.debug("executor.finished", command=command, returncode=proc.returncode)
        return ExecutionResult(
            command=command,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )


def is_cd(command: str) -> bool:
    return command == "cd" or command.startswith("cd ")


def cd_target(command: str) -> Path:
    """Resolve the directory a ``cd`` / ``cd <path>`` command points at."""
    arg = command[2:].strip()
    if not arg:
        return Path.home()
    return Path(expand_home(arg))


def change_directory(command: str) -> str | None:
    """Apply a ``cd`` command to this process; return an error message on failure."""
    target = cd_target(command)
    try:
        os.chdir(target)
    except OSError as exc:
        get_runtime_logger().info("executor.cd_failed", target=str(target), error=str(exc))
        return f"cd: {exc.strerror or exc}: {target}"
    get_runtime_logger().debug("executor.cd", target=str(target))
    return None
