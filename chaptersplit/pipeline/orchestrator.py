"""Per-chapter decode/encode pipeline orchestration.

Responsibilities:
- Launch the encode stage, then the decode stage, joined by one OS pipe.
- Wait on both stages concurrently and kill the sibling on the first failure.
- Never return while a stage process is still running.

Key types:
- `StageStreams`: explicit stdin/stdout/stderr bindings for both stages.
- `ProcessLauncher`: seam for starting stage processes (`SubprocessLauncher` by default).
- `ChapterPipelineRunner`: runs one pipeline per `ChapterJob`, sequentially.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
import os
import queue
import subprocess
import threading
from typing import IO, Any, Protocol, Sequence

from loguru import logger

from ..commands import build_decode_command, build_encode_command
from ..config import ToolSettings
from ..errors import LaunchFailureError, StageFailureError
from ..models.datatypes import ChapterJob, StageOutcome

DECODE_STAGE = "decode"
ENCODE_STAGE = "encode"

StreamTarget = IO[Any] | int | None


class ProcessHandle(Protocol):
    """Minimal process contract the orchestrator relies on."""

    def wait(self) -> int:
        """Block until the process exits and return its status."""

    def kill(self) -> None:
        """Forcibly terminate the process."""


class ProcessLauncher(Protocol):
    """Start one stage process with explicit stream bindings."""

    def launch(
        self,
        command: Sequence[str],
        *,
        stdin: StreamTarget,
        stdout: StreamTarget,
        stderr: StreamTarget,
    ) -> ProcessHandle:
        """Start `command` and return its handle; raise `OSError` when it cannot start."""


class SubprocessLauncher:
    """Launch stage processes with `subprocess.Popen`."""

    def launch(
        self,
        command: Sequence[str],
        *,
        stdin: StreamTarget,
        stdout: StreamTarget,
        stderr: StreamTarget,
    ) -> subprocess.Popen:
        return subprocess.Popen(list(command), stdin=stdin, stdout=stdout, stderr=stderr)


@dataclass(frozen=True, slots=True)
class StageStreams:
    """Stream bindings shared by both stages of every chapter pipeline.

    Attributes:
        stdin: Decode stage standard input (credential prompts), inherited when `None`.
        stdout: Encode stage standard output, inherited when `None`.
        stderr: Standard error of both stages, inherited when `None`.
    """

    stdin: StreamTarget = None
    stdout: StreamTarget = None
    stderr: StreamTarget = None


class ChapterPipelineRunner:
    """Run decode→encode pipelines one chapter at a time."""

    def __init__(
        self,
        tools: ToolSettings | None = None,
        *,
        launcher: ProcessLauncher | None = None,
        streams: StageStreams | None = None,
    ) -> None:
        self._tools = tools or ToolSettings()
        self._launcher = launcher or SubprocessLauncher()
        self._streams = streams or StageStreams()

    def run_chapter(self, job: ChapterJob) -> None:
        """Transcode one chapter through a decode→encode process pair.

        Raises:
            LaunchFailureError: If either stage could not be started.
            StageFailureError: If a started stage terminated with an error.
        """

        commands = {
            DECODE_STAGE: build_decode_command(job, self._tools),
            ENCODE_STAGE: build_encode_command(job, self._tools),
        }
        processes: dict[str, ProcessHandle] = {}

        read_fd, write_fd = os.pipe()
        try:
            # The reader must exist before the writer starts producing.
            processes[ENCODE_STAGE] = self._start(
                ENCODE_STAGE,
                commands[ENCODE_STAGE],
                stdin=read_fd,
                stdout=self._streams.stdout,
            )
            processes[DECODE_STAGE] = self._start(
                DECODE_STAGE,
                commands[DECODE_STAGE],
                stdin=self._streams.stdin,
                stdout=write_fd,
            )
        except BaseException:
            self._terminate(processes)
            raise
        finally:
            os.close(read_fd)
            os.close(write_fd)

        try:
            self._await_stages(processes, commands)
        except StageFailureError:
            # Both stages have been reaped by their watchers.
            raise
        except BaseException:
            self._terminate(processes)
            raise
        logger.debug("Chapter {} written to {}", job.number, job.output_path)

    def _start(
        self,
        stage: str,
        command: list[str],
        *,
        stdin: StreamTarget,
        stdout: StreamTarget,
    ) -> ProcessHandle:
        """Launch one stage, mapping start-up errors to `LaunchFailureError`."""

        logger.debug("Starting {} stage: {}", stage, command[0])
        try:
            return self._launcher.launch(
                command,
                stdin=stdin,
                stdout=stdout,
                stderr=self._streams.stderr,
            )
        except OSError as exc:
            raise LaunchFailureError(stage=stage, command=command, reason=str(exc)) from exc

    def _await_stages(
        self,
        processes: dict[str, ProcessHandle],
        commands: dict[str, list[str]],
    ) -> None:
        """Collect one outcome per stage and cancel the sibling of the first failure."""

        events: queue.Queue[StageOutcome] = queue.Queue()
        watchers = [
            threading.Thread(
                target=_watch,
                args=(stage, process, events),
                name=f"{stage}-watcher",
                daemon=True,
            )
            for stage, process in processes.items()
        ]
        for watcher in watchers:
            watcher.start()

        failure: StageOutcome | None = None
        for _ in range(len(watchers)):
            outcome = events.get()
            if failure is not None:
                # Status of a killed sibling carries no information.
                logger.debug("Discarding {} outcome after cancellation", outcome.stage)
                continue
            if outcome.failed:
                failure = outcome
                for stage, process in processes.items():
                    # A stage whose wait raised may still be running.
                    if stage != outcome.stage or outcome.error is not None:
                        logger.debug("Killing {} stage after {} failed", stage, outcome.stage)
                        _kill(process)

        for watcher in watchers:
            watcher.join()

        if failure is not None:
            reason = None
            if failure.error is not None:
                reason = f"{type(failure.error).__name__}: {failure.error}"
            raise StageFailureError(
                stage=failure.stage,
                command=commands[failure.stage],
                returncode=failure.returncode,
                reason=reason,
            )

    @staticmethod
    def _terminate(processes: dict[str, ProcessHandle]) -> None:
        """Kill and reap every started stage."""

        for process in processes.values():
            _kill(process)
        for process in processes.values():
            process.wait()


def _watch(stage: str, process: ProcessHandle, events: queue.Queue[StageOutcome]) -> None:
    """Wait for one stage to exit and publish exactly one outcome."""

    try:
        returncode = process.wait()
    except Exception as exc:
        events.put(StageOutcome(stage=stage, returncode=None, error=exc))
        return
    events.put(StageOutcome(stage=stage, returncode=returncode))


def _kill(process: ProcessHandle) -> None:
    with contextlib.suppress(ProcessLookupError):
        process.kill()
