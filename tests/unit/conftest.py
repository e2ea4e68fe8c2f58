"""Unit test fixtures: in-memory store and CSV file helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from tests.fakes import MemoryDocumentStore


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write ``lines`` to ``tmp_path/name`` and return the path."""

    def _write(name: str, *lines: str, newline: str = "\n") -> Path:
        path = tmp_path / name
        path.write_text(newline.join(lines) + newline, encoding="utf-8")
        return path

    return _write
