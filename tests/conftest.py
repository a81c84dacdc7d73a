"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

import devsweep.storage as storage


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect storage to a temp directory."""
    data_dir = tmp_path / "devsweep_data"
    data_dir.mkdir()
    history_file = data_dir / "history.json"
    monkeypatch.setattr(storage, "HISTORY_FILE", history_file)
    monkeypatch.setattr(storage, "_DATA_DIR", data_dir)
    return history_file


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """An empty home directory with XDG locations pointing inside it."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    for var in ("GOCACHE", "GOMODCACHE", "GOPATH", "GOTESTCACHE"):
        monkeypatch.delenv(var, raising=False)
    return Path(os.path.realpath(home))


def write_file(path: Path, size: int) -> Path:
    """Create *path* (and its parents) holding *size* bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


def sparse_file(path: Path, size: int) -> Path:
    """Create a sparse file whose apparent size is *size*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path
