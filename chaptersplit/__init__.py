"""Top-level package for chaptersplit.

This package splits a chaptered audiobook container into one tagged mp3 per
chapter by streaming `ffmpeg` output into `lame`. The main orchestration entry
point is `ChapterSplitPipeline`.
"""

from .splitter import ChapterSplitPipeline

__all__ = ["ChapterSplitPipeline", "__version__"]

__version__ = "0.1.0"
