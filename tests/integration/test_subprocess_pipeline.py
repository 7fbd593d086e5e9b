"""Integration tests running real stage processes through an OS pipe."""

from __future__ import annotations

from pathlib import Path
import subprocess
import sys
import textwrap
import time

import pytest

from chaptersplit.chapters import build_chapter_jobs
from chaptersplit.config import ToolSettings
from chaptersplit.errors import LaunchFailureError, StageFailureError
from chaptersplit.models.datatypes import ChapterJob
from chaptersplit.pipeline.orchestrator import ChapterPipelineRunner, StageStreams
from tests.fakes import build_probe_result

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX script shebangs")

_PAYLOAD = b"RIFF" + b"\x00\x01" * 4096
_DEADLINE_SECONDS = 20.0


def _script(path: Path, body: str) -> str:
    """Write an executable Python script standing in for an external tool."""

    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
    path.chmod(0o755)
    return str(path)


def _decoder_writing_payload(tmp_path: Path) -> str:
    return _script(
        tmp_path / "fake-ffmpeg",
        f"""
        import sys
        sys.stdout.buffer.write({_PAYLOAD!r})
        sys.stdout.buffer.flush()
        """,
    )


def _encoder_copying_stdin(tmp_path: Path) -> str:
    return _script(
        tmp_path / "fake-lame",
        """
        import sys
        data = sys.stdin.buffer.read()
        with open(sys.argv[-1], "wb") as handle:
            handle.write(data)
        """,
    )


def _sleeper(path: Path) -> str:
    return _script(
        path,
        """
        import time
        time.sleep(60)
        """,
    )


def _failer(path: Path, status: int) -> str:
    return _script(
        path,
        f"""
        import sys
        sys.exit({status})
        """,
    )


def _job(tmp_path: Path) -> ChapterJob:
    return build_chapter_jobs(
        build_probe_result(["Intro"]),
        input_path=tmp_path / "book.m4b",
        output_dir=tmp_path,
        title="MyBook",
    )[0]


def _runner(*, ffmpeg: str, lame: str) -> ChapterPipelineRunner:
    return ChapterPipelineRunner(
        ToolSettings(ffmpeg=ffmpeg, lame=lame),
        streams=StageStreams(stderr=subprocess.DEVNULL),
    )


def test_decoder_output_streams_into_encoder_output_file(tmp_path: Path) -> None:
    """Bytes written by the decoder should arrive unmodified in the encoded file."""

    job = _job(tmp_path)
    runner = _runner(
        ffmpeg=_decoder_writing_payload(tmp_path),
        lame=_encoder_copying_stdin(tmp_path),
    )

    runner.run_chapter(job)

    assert job.output_path.read_bytes() == _PAYLOAD


def test_failing_decoder_kills_sleeping_encoder(tmp_path: Path) -> None:
    """A failing decoder should not leave the run waiting on the encoder."""

    runner = _runner(
        ffmpeg=_failer(tmp_path / "fake-ffmpeg", 3),
        lame=_sleeper(tmp_path / "fake-lame"),
    )

    started = time.monotonic()
    with pytest.raises(StageFailureError) as exc_info:
        runner.run_chapter(_job(tmp_path))

    assert time.monotonic() - started < _DEADLINE_SECONDS
    assert exc_info.value.stage == "decode"
    assert exc_info.value.returncode == 3


def test_failing_encoder_kills_sleeping_decoder(tmp_path: Path) -> None:
    """A failing encoder should not leave the run waiting on the decoder."""

    runner = _runner(
        ffmpeg=_sleeper(tmp_path / "fake-ffmpeg"),
        lame=_failer(tmp_path / "fake-lame", 4),
    )

    started = time.monotonic()
    with pytest.raises(StageFailureError) as exc_info:
        runner.run_chapter(_job(tmp_path))

    assert time.monotonic() - started < _DEADLINE_SECONDS
    assert exc_info.value.stage == "encode"
    assert exc_info.value.returncode == 4


def test_missing_encoder_executable_is_a_launch_failure(tmp_path: Path) -> None:
    """A non-existent encoder should fail to launch without starting the decoder."""

    runner = _runner(
        ffmpeg=_sleeper(tmp_path / "fake-ffmpeg"),
        lame=str(tmp_path / "does-not-exist"),
    )

    with pytest.raises(LaunchFailureError) as exc_info:
        runner.run_chapter(_job(tmp_path))

    assert exc_info.value.stage == "encode"
    assert str(tmp_path / "does-not-exist") in exc_info.value.detail
