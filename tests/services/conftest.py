# tests/services/conftest.py
from __future__ import annotations

import pytest

from _fakes import FakeProber, FakeTranscoder


@pytest.fixture()
def fake_prober() -> FakeProber:
    return FakeProber()


@pytest.fixture()
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()
