# hexaudio/services/transcode/ffmpeg_runner.py
from __future__ import annotations

import shlex
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from hexaudio.common.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass(eq=False)
class FFmpegError(RuntimeError):
    """Adapter-level error for engine failures; translated by callers into domain errors."""
    message: str
    stderr: Optional[str] = None
    rc: Optional[int] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass(frozen=True)
class FFmpegRun:
    cmd: Tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


def format_cmd(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(p)) for p in cmd)


def run_ffmpeg(
    cmd: Sequence[str],
    *,
    timeout_sec: Optional[float] = None,
    duration_sec: Optional[float] = None,
    on_progress: Optional[ProgressCallback] = None,
    check: bool = True,
) -> FFmpegRun:
    """
    Run one engine invocation to completion and capture its output.

    With `on_progress`, the command is expected to carry `-progress pipe:1`;
    percentages are derived from `out_time_us` against `duration_sec` and
    passed through. They never influence the outcome.
    """
    cmd = [str(c) for c in cmd]
    logger.debug("ffmpeg cmd: %s", format_cmd(cmd))

    if on_progress is None:
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout_sec,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise FFmpegError(f"ffmpeg timed out after {timeout_sec}s", stderr=_as_text(e.stderr)) from e
        except OSError as e:
            raise FFmpegError("Failed to execute ffmpeg (OS error)", stderr=str(e)) from e
        run = FFmpegRun(tuple(cmd), proc.returncode, proc.stdout or "", proc.stderr or "")
    else:
        run = _run_streaming(cmd, timeout_sec, duration_sec, on_progress)

    if check and run.returncode != 0:
        raise FFmpegError("ffmpeg returned non-zero exit code", stderr=run.stderr, rc=run.returncode)
    return run


def _run_streaming(
    cmd: List[str],
    timeout_sec: Optional[float],
    duration_sec: Optional[float],
    on_progress: ProgressCallback,
) -> FFmpegRun:
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise FFmpegError("Failed to execute ffmpeg (OS error)", stderr=str(e)) from e

    err_lines: List[str] = []
    out_lines: List[str] = []
    drain = threading.Thread(target=lambda: err_lines.extend(proc.stderr), daemon=True)  # type: ignore[arg-type]
    drain.start()

    timed_out = threading.Event()

    def _kill() -> None:
        timed_out.set()
        proc.kill()

    watchdog = threading.Timer(timeout_sec, _kill) if timeout_sec else None
    if watchdog:
        watchdog.daemon = True
        watchdog.start()
    try:
        assert proc.stdout is not None
        for line in proc.stdout:
            out_lines.append(line)
            pct = progress_percent(line, duration_sec)
            if pct is not None:
                _emit(on_progress, pct)
        rc = proc.wait()
    finally:
        if watchdog:
            watchdog.cancel()
        drain.join(timeout=5)

    stderr = "".join(err_lines)
    if timed_out.is_set():
        raise FFmpegError(f"ffmpeg timed out after {timeout_sec}s", stderr=stderr, rc=rc)
    return FFmpegRun(tuple(cmd), rc, "".join(out_lines), stderr)


def progress_percent(line: str, duration_sec: Optional[float]) -> Optional[float]:
    """
    One `-progress` key=value line -> percent complete, or None when the
    line carries no position (or the duration is unknown).
    """
    key, _, value = line.strip().partition("=")
    if key == "progress" and value == "end":
        return 100.0
    if not duration_sec or duration_sec <= 0:
        return None
    if key in ("out_time_us", "out_time_ms"):  # both are microseconds
        try:
            seconds = int(value) / 1_000_000
        except ValueError:
            return None
    else:
        return None
    return max(0.0, min(100.0, seconds / duration_sec * 100.0))


def _emit(cb: ProgressCallback, pct: float) -> None:
    try:
        cb(pct)
    except Exception:
        logger.exception("progress callback failed at %.1f%%", pct)


def _as_text(data: bytes | str | None) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, bytes):
        return data.decode("utf-8", "replace")
    return data
