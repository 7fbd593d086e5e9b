"""Executable resolution for `ffprobe`, `ffmpeg` and `lame`.

Lookup order for a bare tool name:
1. `$CHAPTERSPLIT_TOOLS_DIR/<tool>`, for side-by-side tool bundles.
2. System `PATH`.
3. The bare name, so launching reports the native missing-binary error.

Names with a directory component are taken as given.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
from typing import Mapping

TOOLS_DIR_ENV = "CHAPTERSPLIT_TOOLS_DIR"


def resolve_executable(command_name: str, env: Mapping[str, str] | None = None) -> str:
    """Return the executable path used to launch `command_name`."""

    normalized = command_name.strip()
    if not normalized or Path(normalized).parent != Path("."):
        return normalized or command_name

    bundled = _bundled_tool(normalized, os.environ if env is None else env)
    if bundled is not None:
        return str(bundled)
    return shutil.which(normalized) or normalized


def _bundled_tool(command_name: str, env: Mapping[str, str]) -> Path | None:
    tools_dir = env.get(TOOLS_DIR_ENV, "").strip()
    if not tools_dir:
        return None
    candidate = Path(tools_dir) / command_name
    if candidate.is_file() and os.access(candidate, os.X_OK):
        return candidate
    return None
