"""Core datatypes shared across chaptersplit modules.

Responsibilities:
- Represent immutable records exchanged between probe, job planning and pipeline.
- Keep container timecodes as opaque strings so they reach the decoder verbatim.

Key types:
- `FormatTags`, `FormatMetadata`, `Chapter`, `ProbeResult`, `ChapterTags`,
  `ChapterJob`, `StageOutcome`, and `SplitResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class FormatTags:
    """Container-level tags reported by the metadata probe.

    Attributes:
        title: Book title tag.
        artist: Artist/author tag.
        album: Album tag as stored in the container.
        album_artist: Album artist tag.
        genre: Genre tag.
        date: Free-form date tag.
        description: Description/comment tag.
        copyright: Copyright tag.
        creation_time: Raw ISO-8601 creation timestamp, empty when absent.
    """

    title: str = ""
    artist: str = ""
    album: str = ""
    album_artist: str = ""
    genre: str = ""
    date: str = ""
    description: str = ""
    copyright: str = ""
    creation_time: str = ""

    @property
    def creation_year(self) -> int | None:
        """Return the year of `creation_time`, or `None` when it cannot be parsed."""

        raw = self.creation_time.strip()
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).year
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class FormatMetadata:
    """Format section of the probe output.

    Attributes:
        filename: Input filename as reported by the probe.
        duration: Total duration string as reported by the probe.
        format_name: Container format identifier.
        tags: Container-level tags.
    """

    filename: str
    duration: str = ""
    format_name: str = ""
    tags: FormatTags = field(default_factory=FormatTags)


@dataclass(frozen=True, slots=True)
class Chapter:
    """One chapter marker inside the container.

    Attributes:
        id: 0-based chapter id from the source data.
        start_time: Container-native start timecode, passed through unmodified.
        end_time: Container-native end timecode, passed through unmodified.
        title: Chapter title tag.
        time_base: Time base of the raw chapter offsets.
    """

    id: int
    start_time: str
    end_time: str
    title: str = ""
    time_base: str = ""


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Format metadata and ordered chapter list for one input container."""

    format: FormatMetadata
    chapters: tuple[Chapter, ...] | None


@dataclass(frozen=True, slots=True)
class ChapterTags:
    """Explicit tag values written by the encode stage for one chapter."""

    title: str
    artist: str
    album: str
    genre: str
    description: str
    year: int | None
    track: int


@dataclass(frozen=True, slots=True)
class ChapterJob:
    """Everything needed to transcode one chapter.

    Attributes:
        number: 1-based chapter ordinal within the run.
        chapter: Source chapter marker.
        input_path: Source container path.
        output_path: Resolved output file path.
        tags: Resolved per-chapter and album-level tags.
        activation_bytes: Optional decryption key, `None` when not provided.
    """

    number: int
    chapter: Chapter
    input_path: Path
    output_path: Path
    tags: ChapterTags
    activation_bytes: str | None = None


@dataclass(frozen=True, slots=True)
class StageOutcome:
    """Completion event published by one stage watcher.

    Attributes:
        stage: Stage name (`decode` or `encode`).
        returncode: Process exit status, `None` when waiting raised.
        error: Exception raised while waiting for the process, if any.
    """

    stage: str
    returncode: int | None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        """Return whether the stage terminated with an error."""

        return self.error is not None or self.returncode != 0


@dataclass(frozen=True, slots=True)
class SplitResult:
    """Summary of one completed split run."""

    input_path: Path
    output_dir: Path
    title: str
    outputs: tuple[Path, ...]
