"""Shared pytest fixtures for the full chaptersplit test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from loguru import logger
import pytest

from tests.fakes import FakeLauncher


@pytest.fixture(autouse=True)
def _reset_loguru_handlers() -> Iterator[None]:
    """Drop sinks bound to per-test streams once a test finishes."""

    yield
    logger.remove()


@pytest.fixture
def fake_launcher() -> FakeLauncher:
    """Provide a launcher whose stages exit successfully by default."""

    return FakeLauncher()


@pytest.fixture
def input_container(tmp_path: Path) -> Path:
    """Provide a placeholder chaptered input file."""

    path = tmp_path / "The Long Book.m4b"
    path.write_bytes(b"m4b")
    return path
