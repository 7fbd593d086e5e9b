"""Unit tests for chapter job planning, filenames and title resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from chaptersplit.chapters import (
    build_chapter_jobs,
    chapter_filename,
    chapter_number,
    resolve_title,
)
from chaptersplit.errors import InvalidInputError
from chaptersplit.models.datatypes import Chapter, FormatMetadata, FormatTags
from tests.fakes import build_probe_result


@pytest.mark.parametrize(
    ("ordinal", "expected"),
    [(1, "0001"), (10, "0010"), (123, "0123"), (1000, "1000")],
)
def test_chapter_number_is_four_digit_zero_padded(ordinal: int, expected: str) -> None:
    """Chapter numbers should always render as four left-zero-padded digits."""

    assert chapter_number(ordinal) == expected


def test_build_chapter_jobs_emits_one_job_per_chapter_in_order(tmp_path: Path) -> None:
    """Planning should keep source order and number chapters from one."""

    titles = ["Opening Credits", "Prologue", "Chapter 1", "Epilogue"]
    jobs = build_chapter_jobs(
        build_probe_result(titles),
        input_path=tmp_path / "book.m4b",
        output_dir=tmp_path / "out",
    )

    assert [job.chapter.title for job in jobs] == titles
    assert [job.number for job in jobs] == [1, 2, 3, 4]
    assert [job.chapter.id for job in jobs] == [0, 1, 2, 3]


def test_build_chapter_jobs_renders_numbered_filenames(tmp_path: Path) -> None:
    """Numbered mode should use the 1-based ordinal, not the 0-based chapter id."""

    jobs = build_chapter_jobs(
        build_probe_result(["Intro", "Chapter One"]),
        input_path=tmp_path / "book.m4b",
        output_dir=tmp_path / "out",
        title="MyBook",
        with_chapter_number=True,
    )

    assert [job.output_path for job in jobs] == [
        tmp_path / "out" / "MyBook - 0001 Intro.mp3",
        tmp_path / "out" / "MyBook - 0002 Chapter One.mp3",
    ]


def test_build_chapter_jobs_omits_number_when_disabled(tmp_path: Path) -> None:
    """Unnumbered mode should join title and chapter title only."""

    jobs = build_chapter_jobs(
        build_probe_result(["Intro"]),
        input_path=tmp_path / "book.m4b",
        output_dir=tmp_path,
        title="MyBook",
        extension="ogg",
    )

    assert jobs[0].output_path.name == "MyBook - Intro.ogg"


def test_chapter_filename_keeps_chapter_title_verbatim() -> None:
    """Chapter titles should not be slugified or otherwise rewritten."""

    chapter = Chapter(id=41, start_time="0.0", end_time="1.0", title="Part II: The Return")

    assert (
        chapter_filename(
            title="Saga",
            chapter=chapter,
            ordinal=42,
            with_chapter_number=True,
            extension="mp3",
        )
        == "Saga - 0042 Part II: The Return.mp3"
    )


@pytest.mark.parametrize("chapter_titles", [None, []])
def test_build_chapter_jobs_rejects_missing_or_empty_chapters(
    tmp_path: Path, chapter_titles: list[str] | None
) -> None:
    """Containers without chapters should fail before any side effect."""

    output_dir = tmp_path / "out"

    with pytest.raises(InvalidInputError) as exc_info:
        build_chapter_jobs(
            build_probe_result(chapter_titles),
            input_path=tmp_path / "book.m4b",
            output_dir=output_dir,
        )

    assert exc_info.value.stage == "chapters"
    assert not output_dir.exists()


def test_resolve_title_prefers_explicit_title() -> None:
    """An explicit title should shadow the container title tag."""

    metadata = FormatMetadata(filename="x", tags=FormatTags(title="Tagged Title"))

    assert resolve_title("Override", metadata, Path("dir/file.m4b")) == "Override"


def test_resolve_title_falls_back_to_format_tag() -> None:
    """The container title tag should shadow the input basename."""

    metadata = FormatMetadata(filename="x", tags=FormatTags(title="Tagged Title"))

    assert resolve_title("", metadata, Path("dir/file.m4b")) == "Tagged Title"


def test_resolve_title_falls_back_to_input_stem() -> None:
    """Without explicit or tagged titles, the input name without extension is used."""

    metadata = FormatMetadata(filename="x")

    assert resolve_title(None, metadata, Path("dir/My Book.v2.m4b")) == "My Book.v2"


def test_build_chapter_jobs_resolves_album_level_tags(tmp_path: Path) -> None:
    """Every job should carry chapter title plus format-level artist/genre/year tags."""

    jobs = build_chapter_jobs(
        build_probe_result(["Intro", "Outro"], title="Tagged"),
        input_path=tmp_path / "book.m4b",
        output_dir=tmp_path,
        activation_bytes="  ",
    )

    first, second = (job.tags for job in jobs)
    assert first.title == "Intro"
    assert second.title == "Outro"
    assert first.album == second.album == "Tagged"
    assert first.artist == "Jane Author"
    assert first.genre == "Audiobook"
    assert first.description == "A test book."
    assert first.year == 2019
    assert (first.track, second.track) == (1, 2)
    assert jobs[0].activation_bytes is None
