import subprocess

import pytest

import hexaudio.services.transcode.ffmpeg_runner as runner_mod
from hexaudio.services.transcode.ffmpeg_runner import FFmpegError, format_cmd, progress_percent, run_ffmpeg


@pytest.mark.parametrize(
    "line,duration,expected",
    [
        ("out_time_us=5000000\n", 10.0, 50.0),
        ("out_time_ms=2500000", 10.0, 25.0),
        ("out_time_us=20000000", 10.0, 100.0),   # clamped
        ("out_time_us=N/A", 10.0, None),
        ("out_time_us=5000000", None, None),
        ("frame=12", 10.0, None),
        ("progress=continue", 10.0, None),
        ("progress=end", None, 100.0),
    ],
)
def test_progress_percent(line, duration, expected):
    assert progress_percent(line, duration) == expected


def test_format_cmd_quotes_paths():
    assert format_cmd(["ffmpeg", "-i", "my file.mp4"]) == "ffmpeg -i 'my file.mp4'"


def test_run_ffmpeg_nonzero_exit_raises_with_stderr(monkeypatch):
    def _fake_run(cmd, **kw):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Invalid data found when processing input")

    monkeypatch.setattr(runner_mod.subprocess, "run", _fake_run)
    with pytest.raises(FFmpegError) as ei:
        run_ffmpeg(["ffmpeg", "-i", "x"])
    assert ei.value.rc == 1
    assert "Invalid data" in ei.value.stderr


def test_run_ffmpeg_check_false_returns_run(monkeypatch):
    monkeypatch.setattr(
        runner_mod.subprocess, "run",
        lambda cmd, **kw: subprocess.CompletedProcess(cmd, 3, stdout="out", stderr="err"),
    )
    run = run_ffmpeg(["ffmpeg", "-version"], check=False)
    assert (run.returncode, run.stdout, run.stderr) == (3, "out", "err")
    assert run.cmd == ("ffmpeg", "-version")


def test_run_ffmpeg_timeout_and_spawn_errors(monkeypatch):
    def _timeout(cmd, **kw):
        raise subprocess.TimeoutExpired(cmd, kw.get("timeout"), stderr=b"partial")

    monkeypatch.setattr(runner_mod.subprocess, "run", _timeout)
    with pytest.raises(FFmpegError, match="timed out"):
        run_ffmpeg(["ffmpeg"], timeout_sec=1)

    def _missing(cmd, **kw):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(runner_mod.subprocess, "run", _missing)
    with pytest.raises(FFmpegError, match="OS error"):
        run_ffmpeg(["/nope/ffmpeg"])
