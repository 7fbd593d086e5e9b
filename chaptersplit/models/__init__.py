"""Shared typed data models for chaptersplit.

This package contains dataclasses used across modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    Chapter,
    ChapterJob,
    ChapterTags,
    FormatMetadata,
    FormatTags,
    ProbeResult,
    SplitResult,
    StageOutcome,
)

__all__ = [
    "Chapter",
    "ChapterJob",
    "ChapterTags",
    "FormatMetadata",
    "FormatTags",
    "ProbeResult",
    "SplitResult",
    "StageOutcome",
]
