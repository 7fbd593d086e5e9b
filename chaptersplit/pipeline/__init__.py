"""Per-chapter transcoding pipeline components."""

from .orchestrator import (
    DECODE_STAGE,
    ENCODE_STAGE,
    ChapterPipelineRunner,
    ProcessLauncher,
    StageStreams,
    SubprocessLauncher,
)

__all__ = [
    "DECODE_STAGE",
    "ENCODE_STAGE",
    "ChapterPipelineRunner",
    "ProcessLauncher",
    "StageStreams",
    "SubprocessLauncher",
]
