# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a work directory, a cache directory, a call factory and an
in-memory record store.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from binboh.cache.memory_store import MemoryRecordStore
from binboh.core.models import Call
from binboh.logging.context import clear_context


# === FIXTURES: Temp dirs ===


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Temporary working directory for calls."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


# === FIXTURES: Calls & stores ===


@pytest.fixture
def make_call(workdir: Path) -> Callable[..., Call]:
    """Factory for calls rooted at the work directory."""

    def _make(
        inputs: Sequence[str] = (),
        outputs: Sequence[str] = (),
        command: Sequence[str] = ("true",),
        working_directory: Path | None = None,
    ) -> Call:
        return Call(
            working_directory=working_directory or workdir,
            inputs=list(inputs),
            outputs=list(outputs),
            command=list(command),
        )

    return _make


@pytest.fixture
def memory_store() -> MemoryRecordStore:
    """Empty in-memory record store."""
    return MemoryRecordStore()


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()
