"""Shared fixtures for chunky tests."""

from pathlib import Path
from typing import Any

import pytest

from chunky.config.chunking.models import ChunkOptions


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """Output directory that does not exist yet."""
    return tmp_path / "chunks"


@pytest.fixture
def make_options(out_dir: Path):
    """Build ChunkOptions writing to out_dir with "\\n" terminators."""

    def _make(**overrides: Any) -> ChunkOptions:
        values: dict[str, Any] = {"out_dir": str(out_dir), "line_terminator": "\n"}
        values.update(overrides)
        return ChunkOptions(**values)

    return _make


def read_chunks(directory: Path, pattern: str = "*.txt") -> list[str]:
    """Contents of matching chunk files in name order."""
    return [p.read_text(encoding="utf-8") for p in sorted(directory.glob(pattern))]
