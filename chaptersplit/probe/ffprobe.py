"""Chapter and format metadata retrieval through `ffprobe`.

Responsibilities:
- Build the single `ffprobe` invocation for one input container.
- Map the JSON report into immutable `FormatMetadata` and `Chapter` records.
- Surface every failure as `ProbeFailureError` carrying the attempted command.
"""

from __future__ import annotations

import json
from pathlib import Path
import subprocess
from typing import IO, Any, Mapping

from loguru import logger

from ..errors import ProbeFailureError
from ..models.datatypes import Chapter, FormatMetadata, FormatTags, ProbeResult
from ..parsing import normalize_optional_string


def build_probe_command(
    input_path: Path,
    activation_bytes: str | None = None,
    executable: str = "ffprobe",
) -> list[str]:
    """Return the `ffprobe` argument vector; blank keys are never forwarded."""

    command = [executable]
    key = normalize_optional_string(activation_bytes)
    if key is not None:
        command += ["-activation_bytes", key]
    command += [
        "-i",
        str(input_path),
        "-print_format",
        "json",
        "-show_format",
        "-show_chapters",
    ]
    return command


def probe(
    input_path: Path,
    activation_bytes: str | None = None,
    *,
    executable: str = "ffprobe",
    stdin: IO[Any] | int | None = None,
) -> ProbeResult:
    """Run `ffprobe` once and return the format metadata plus ordered chapters.

    Args:
        input_path: Source container path.
        activation_bytes: Optional decryption key; blank values are dropped.
        executable: Resolved `ffprobe` executable.
        stdin: Stream bound to the probe's standard input, inherited when `None`.

    Raises:
        ProbeFailureError: If the tool is missing, exits non-zero, or emits invalid JSON.
    """

    command = build_probe_command(input_path, activation_bytes, executable)
    logger.debug("Running metadata probe for {}", input_path)

    try:
        completed = subprocess.run(
            command,
            stdin=stdin,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except FileNotFoundError as exc:
        raise ProbeFailureError(
            command=command,
            reason=f"executable not found ({exc})",
            hint="Install ffmpeg (which provides ffprobe) and rerun.",
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = normalize_optional_string(exc.stderr) or "no stderr output"
        raise ProbeFailureError(
            command=command,
            reason=f"exit status {exc.returncode}: {stderr}",
        ) from exc

    try:
        payload = json.loads(completed.stdout)
    except json.JSONDecodeError as exc:
        raise ProbeFailureError(command=command, reason=f"unparseable JSON output: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ProbeFailureError(command=command, reason="JSON output is not an object")

    return parse_probe_payload(payload)


def parse_probe_payload(payload: Mapping[str, Any]) -> ProbeResult:
    """Map a decoded `ffprobe` JSON report into a `ProbeResult`."""

    format_section = payload.get("format") or {}
    raw_tags = format_section.get("tags") or {}
    tags = FormatTags(
        title=_tag(raw_tags, "title"),
        artist=_tag(raw_tags, "artist"),
        album=_tag(raw_tags, "album"),
        album_artist=_tag(raw_tags, "album_artist"),
        genre=_tag(raw_tags, "genre"),
        date=_tag(raw_tags, "date"),
        description=_tag(raw_tags, "description"),
        copyright=_tag(raw_tags, "copyright"),
        creation_time=_tag(raw_tags, "creation_time"),
    )
    format_metadata = FormatMetadata(
        filename=str(format_section.get("filename", "")),
        duration=str(format_section.get("duration", "")),
        format_name=str(format_section.get("format_name", "")),
        tags=tags,
    )

    raw_chapters = payload.get("chapters")
    if raw_chapters is None:
        return ProbeResult(format=format_metadata, chapters=None)

    chapters = tuple(
        Chapter(
            id=int(entry.get("id", index)),
            start_time=str(entry.get("start_time", "")),
            end_time=str(entry.get("end_time", "")),
            title=_tag(entry.get("tags") or {}, "title"),
            time_base=str(entry.get("time_base", "")),
        )
        for index, entry in enumerate(raw_chapters)
    )
    return ProbeResult(format=format_metadata, chapters=chapters)


def _tag(tags: Mapping[str, Any], key: str) -> str:
    """Read one tag value case-insensitively, returning an empty string when absent."""

    if key in tags:
        return str(tags[key])
    lowered = key.lower()
    for tag_key, value in tags.items():
        if str(tag_key).lower() == lowered:
            return str(value)
    return ""
