"""Shared test fixtures."""
import os
import time
from pathlib import Path

import pytest

from screenshot_agent.config import Config


@pytest.fixture
def home(tmp_path, monkeypatch):
    """An empty home directory that Path.home() resolves to."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def temp_dir(tmp_path):
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def config(temp_dir):
    return Config(temp_dir=temp_dir, hooks_dir=None)


@pytest.fixture
def make_file():
    """Create a file with given bytes, aged by `age` seconds."""

    def _make(path: Path, data: bytes = b"image", age: float = 0.0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        stamp = time.time() - age
        os.utime(path, (stamp, stamp))
        return path

    return _make
