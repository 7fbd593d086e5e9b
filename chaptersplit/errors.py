"""Domain exceptions for pipeline and CLI diagnostics.

Every error carries the stage it belongs to. Errors caused by an external
tool also keep the full argument vector so the failing invocation can be
reproduced by hand.
"""

from __future__ import annotations

from pathlib import Path
import shlex
from typing import Sequence


def format_command(command: Sequence[str]) -> str:
    """Render an argument vector as one shell-quoted command line."""

    return shlex.join(str(part) for part in command)


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class InvalidInputError(PipelineStageError):
    """Raised when the probed container has no chapters to split."""

    def __init__(self, *, input_path: Path, detail: str) -> None:
        super().__init__(
            stage="chapters",
            detail=detail,
            hint="Only containers with embedded chapter markers can be split.",
        )
        self.input_path = input_path


class ProbeFailureError(PipelineStageError):
    """Raised when chapter/format metadata could not be retrieved."""

    def __init__(self, *, command: Sequence[str], reason: str, hint: str | None = None) -> None:
        super().__init__(
            stage="probe",
            detail=f"{format_command(command)}: {reason}",
            hint=hint,
        )
        self.command = list(command)
        self.reason = reason


class LaunchFailureError(PipelineStageError):
    """Raised when a decode or encode stage process could not be started."""

    def __init__(self, *, stage: str, command: Sequence[str], reason: str) -> None:
        super().__init__(
            stage=stage,
            detail=f"{format_command(command)}: {reason}",
            hint=f"Verify the `{command[0]}` executable is installed and on PATH.",
        )
        self.command = list(command)
        self.reason = reason


class StageFailureError(PipelineStageError):
    """Raised when a started stage process terminated with an error."""

    def __init__(
        self,
        *,
        stage: str,
        command: Sequence[str],
        returncode: int | None,
        reason: str | None = None,
    ) -> None:
        if reason is None:
            reason = f"exit status {returncode}"
        super().__init__(stage=stage, detail=f"{format_command(command)}: {reason}")
        self.command = list(command)
        self.returncode = returncode
        self.reason = reason


class FilesystemFailureError(PipelineStageError):
    """Raised when the output directory could not be created."""

    def __init__(self, *, path: Path, reason: str) -> None:
        super().__init__(
            stage="output",
            detail=f"Could not create output directory `{path}`: {reason}",
            hint="Check the parent directory exists and is writable.",
        )
        self.path = path
