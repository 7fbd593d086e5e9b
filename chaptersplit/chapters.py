"""Chapter job planning.

Responsibilities:
- Resolve the album title used for tags and filename prefixes.
- Derive one `ChapterJob` per probed chapter, in source order.
- Reject containers without chapters before any process or directory work happens.
"""

from __future__ import annotations

from pathlib import Path

from .errors import InvalidInputError
from .models.datatypes import Chapter, ChapterJob, ChapterTags, FormatMetadata, ProbeResult
from .parsing import normalize_optional_string


def resolve_title(explicit_title: str | None, format_metadata: FormatMetadata, input_path: Path) -> str:
    """Return the explicit title, else the container title tag, else the input stem."""

    if explicit_title:
        return explicit_title
    if format_metadata.tags.title:
        return format_metadata.tags.title
    return input_path.stem


def chapter_number(ordinal: int) -> str:
    """Render a 1-based chapter ordinal as a 4-digit zero-padded string."""

    return f"{ordinal:04d}"


def chapter_filename(
    *,
    title: str,
    chapter: Chapter,
    ordinal: int,
    with_chapter_number: bool,
    extension: str,
) -> str:
    """Build the output filename for one chapter."""

    if with_chapter_number:
        return f"{title} - {chapter_number(ordinal)} {chapter.title}.{extension}"
    return f"{title} - {chapter.title}.{extension}"


def build_chapter_jobs(
    probe_result: ProbeResult,
    *,
    input_path: Path,
    output_dir: Path,
    title: str | None = None,
    with_chapter_number: bool = False,
    activation_bytes: str | None = None,
    extension: str = "mp3",
) -> list[ChapterJob]:
    """Plan one transcoding job per chapter.

    Raises:
        InvalidInputError: If the chapter list is absent or empty.
    """

    if probe_result.chapters is None:
        raise InvalidInputError(
            input_path=input_path,
            detail=f"No chapter list reported for `{input_path}`.",
        )
    if not probe_result.chapters:
        raise InvalidInputError(
            input_path=input_path,
            detail=f"Zero chapters in `{input_path}`.",
        )

    format_metadata = probe_result.format
    resolved_title = resolve_title(title, format_metadata, input_path)
    key = normalize_optional_string(activation_bytes)

    jobs: list[ChapterJob] = []
    for ordinal, chapter in enumerate(probe_result.chapters, start=1):
        filename = chapter_filename(
            title=resolved_title,
            chapter=chapter,
            ordinal=ordinal,
            with_chapter_number=with_chapter_number,
            extension=extension,
        )
        jobs.append(
            ChapterJob(
                number=ordinal,
                chapter=chapter,
                input_path=input_path,
                output_path=output_dir / filename,
                tags=_chapter_tags(chapter, format_metadata, resolved_title, ordinal),
                activation_bytes=key,
            )
        )
    return jobs


def _chapter_tags(
    chapter: Chapter, format_metadata: FormatMetadata, album: str, ordinal: int
) -> ChapterTags:
    tags = format_metadata.tags
    return ChapterTags(
        title=chapter.title,
        artist=tags.artist,
        album=album,
        genre=tags.genre,
        description=tags.description,
        year=tags.creation_year,
        track=ordinal,
    )
