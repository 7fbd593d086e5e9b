"""Run-level orchestration for chaptersplit.

Responsibilities:
- Define the stage order of one split run: probe, plan chapters, prepare output, transcode.
- Emit phase telemetry and per-chapter progress.
- Abort the whole run on the first error of any stage or chapter.

Key types:
- `ChapterSplitPipeline`: orchestration facade used by the CLI.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import TypeVar

from .chapters import build_chapter_jobs, resolve_title
from .config import SplitConfig, ToolSettings
from .errors import FilesystemFailureError, PipelineStageError
from .models.datatypes import ChapterJob, ProbeResult, SplitResult
from .pipeline.orchestrator import ChapterPipelineRunner, ProcessLauncher, StageStreams
from .probe.ffprobe import probe
from .runtime_tools import resolve_executable
from .telemetry.logger import RunLogger

_StageResult = TypeVar("_StageResult")

ProbeFunction = Callable[..., ProbeResult]


class ChapterSplitPipeline:
    """Coordinate all stages for a single split run."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        chapter_progress_callback: Callable[[str, int, int], None] | None = None,
        *,
        launcher: ProcessLauncher | None = None,
        streams: StageStreams | None = None,
        prober: ProbeFunction | None = None,
    ) -> None:
        """Initialize optional logging, progress hooks and process seams."""

        self._run_logger = run_logger
        self._chapter_progress_callback = chapter_progress_callback
        self._launcher = launcher
        self._streams = streams or StageStreams()
        self._prober = prober or probe

    def run(self, config: SplitConfig) -> SplitResult:
        """Split `config.input_path` into one encoded file per chapter."""

        self._validate_config(config)
        tools = self._resolve_tools(config.tools)
        input_path = Path(config.input_path)
        output_dir = Path(config.output_dir)

        probe_result = self._run_stage(
            "probe",
            lambda: self._prober(
                input_path,
                config.resolved_activation_bytes,
                executable=tools.ffprobe,
                stdin=self._streams.stdin,
            ),
        )
        jobs = self._run_stage(
            "chapters",
            lambda: build_chapter_jobs(
                probe_result,
                input_path=input_path,
                output_dir=output_dir,
                title=config.title,
                with_chapter_number=config.with_chapter_number,
                activation_bytes=config.resolved_activation_bytes,
                extension=tools.output_extension,
            ),
        )
        self._run_stage("output", lambda: self._prepare_output_dir(output_dir))

        runner = ChapterPipelineRunner(tools, launcher=self._launcher, streams=self._streams)
        outputs = [
            self._run_stage(
                "transcode",
                lambda job=job: self._transcode(runner, job, len(jobs)),
                chapter=job.number,
            )
            for job in jobs
        ]

        return SplitResult(
            input_path=input_path,
            output_dir=output_dir,
            title=resolve_title(config.title, probe_result.format, input_path),
            outputs=tuple(outputs),
        )

    def _transcode(self, runner: ChapterPipelineRunner, job: ChapterJob, total: int) -> Path:
        """Run one chapter pipeline after reporting progress."""

        if self._chapter_progress_callback is not None:
            self._chapter_progress_callback(job.chapter.title, job.number, total)
        runner.run_chapter(job)
        return job.output_path

    def _validate_config(self, config: SplitConfig) -> None:
        """Validate top-level configuration and map failures to stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Fix the command options or config file values and rerun.",
            ) from exc

    @staticmethod
    def _resolve_tools(tools: ToolSettings) -> ToolSettings:
        """Resolve tool executables to bundled or PATH locations."""

        return replace(
            tools,
            ffprobe=resolve_executable(tools.ffprobe),
            ffmpeg=resolve_executable(tools.ffmpeg),
            lame=resolve_executable(tools.lame),
        )

    @staticmethod
    def _prepare_output_dir(output_dir: Path) -> None:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemFailureError(path=output_dir, reason=str(exc)) from exc

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
        **context: object,
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name, **context)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name, **context)
        return result
