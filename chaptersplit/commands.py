"""Argument vectors for the decode (`ffmpeg`) and encode (`lame`) stages."""

from __future__ import annotations

from .config import ToolSettings
from .models.datatypes import ChapterJob


def build_decode_command(job: ChapterJob, tools: ToolSettings) -> list[str]:
    """Return the command extracting one chapter as a WAV stream on stdout.

    Timecodes are forwarded exactly as the probe reported them.
    """

    command = [tools.ffmpeg]
    if job.activation_bytes:
        command += ["-activation_bytes", job.activation_bytes]
    command += [
        "-i",
        str(job.input_path),
        "-f",
        "wav",
        "-c:a",
        "pcm_s16le",
        "-ss",
        job.chapter.start_time,
        "-to",
        job.chapter.end_time,
        "pipe:",
    ]
    return command


def build_encode_command(job: ChapterJob, tools: ToolSettings) -> list[str]:
    """Return the command encoding stdin to the tagged chapter output file."""

    tags = job.tags
    command = [
        tools.lame,
        "-b",
        str(tools.bitrate_kbps),
        "--add-id3v2",
        "--tt",
        tags.title,
        "--ta",
        tags.artist,
        "--tl",
        tags.album,
        "--tc",
        tags.description,
    ]
    if tags.year is not None:
        command += ["--ty", str(tags.year)]
    command += [
        "--tn",
        str(tags.track),
        "--tg",
        tags.genre,
        "-",
        str(job.output_path),
    ]
    return command
