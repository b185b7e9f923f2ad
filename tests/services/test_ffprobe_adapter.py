import json
import subprocess

import pytest

import hexaudio.services.probe.ffprobe_adapter as adapter_mod
from hexaudio.domain.errors import ProbeFailed
from hexaudio.services.probe.ffprobe_adapter import FFprobeAdapter

_PAYLOAD = {
    "format": {"duration": "3.000000", "format_name": "wav", "bit_rate": "256000", "size": "96044"},
    "streams": [
        {"index": 0, "codec_type": "audio", "codec_name": "pcm_s16le", "channels": 1, "sample_rate": "16000"}
    ],
}


def _patch_run(monkeypatch, *, rc=0, stdout="", stderr="", exc=None, seen=None):
    def _fake_run(cmd, **kw):
        if seen is not None:
            seen.append((cmd, kw))
        if exc is not None:
            raise exc
        return subprocess.CompletedProcess(cmd, rc, stdout=stdout, stderr=stderr)

    monkeypatch.setattr(adapter_mod.subprocess, "run", _fake_run)


def test_probe_parses_ffprobe_json(monkeypatch, settings, touch, tmp_path):
    f = touch(tmp_path / "clip.wav")
    seen = []
    _patch_run(monkeypatch, stdout=json.dumps(_PAYLOAD), seen=seen)

    md = FFprobeAdapter("/opt/ffprobe", settings=settings).probe(f)
    assert md.duration == 3.0
    assert md.container == "wav"
    assert md.primary_audio.sample_rate == 16000

    cmd, kw = seen[0]
    assert cmd[0] == "/opt/ffprobe"
    assert cmd[-1] == str(f)
    assert kw["timeout"] == settings.ffprobe_timeout_sec


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rc": 1, "stderr": "clip.wav: Invalid data found when processing input"},
        {"stdout": "not json"},
        {"stdout": "[1, 2]"},
        {"exc": subprocess.TimeoutExpired(["ffprobe"], 30)},
        {"exc": FileNotFoundError(2, "No such file or directory")},
    ],
)
def test_probe_degrades_to_empty_metadata(monkeypatch, settings, touch, tmp_path, kwargs):
    f = touch(tmp_path / "clip.wav")
    _patch_run(monkeypatch, **kwargs)
    adapter = FFprobeAdapter(settings=settings)

    assert adapter.probe(f).is_empty
    with pytest.raises(ProbeFailed):
        adapter.probe_strict(f)


def test_probe_missing_file_never_spawns(monkeypatch, settings, tmp_path):
    seen = []
    _patch_run(monkeypatch, stdout=json.dumps(_PAYLOAD), seen=seen)

    assert FFprobeAdapter(settings=settings).probe(tmp_path / "missing.mp4").is_empty
    assert seen == []


def test_probe_failed_keeps_engine_diagnostic(monkeypatch, settings, touch, tmp_path):
    f = touch(tmp_path / "clip.wav")
    _patch_run(monkeypatch, rc=1, stderr="moov atom not found")
    with pytest.raises(ProbeFailed) as ei:
        FFprobeAdapter(settings=settings).probe_strict(f)
    assert ei.value.rc == 1
    assert "moov atom not found" in str(ei.value)
