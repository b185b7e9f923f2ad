# tests/conftest.py
from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from hexaudio.common import settings as settings_mod
from hexaudio.common.settings import Settings


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    settings_mod.get_settings.cache_clear()
    yield
    settings_mod.get_settings.cache_clear()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    """Settings rooted in a per-test data dir; ignores any local .env."""
    return Settings(_env_file=None, data_root=tmp_path / "data")


@pytest.fixture()
def touch():
    def _touch(p: Path, data: bytes = b"dummy") -> Path:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        return p

    return _touch


def ffmpeg_available() -> bool:
    return shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None
