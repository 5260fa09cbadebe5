"""Shared fixtures: a fixed clock for anchors and a temporary vault."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from highlight_extractor.backends.filesystem_backend import FileSystemVault
from highlight_extractor.core import paths as _paths


class FakeClock:
    """Clock that returns a set moment until advanced."""

    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, seconds: int = 1) -> None:
        self.moment += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def vault_dir(tmp_path, monkeypatch):
    """A vault directory registered as the only accessible root."""
    root = tmp_path / "vault"
    root.mkdir()
    monkeypatch.setattr(_paths, "SEARCH_DIRECTORIES", [str(root.resolve())])
    return root


@pytest.fixture
def vault(vault_dir) -> FileSystemVault:
    return FileSystemVault(vault_dir)
