# hexaudio/services/probe/ffprobe_adapter.py
from __future__ import annotations

import json
import shlex
import subprocess
from pathlib import Path
from typing import Optional

from hexaudio.common.logging import get_logger
from hexaudio.common.probe.ffprobe_helpers import build_ffprobe_cmd, parse_ffprobe
from hexaudio.common.settings import Settings, get_settings
from hexaudio.domain.entities.media_metadata import MediaMetadata
from hexaudio.domain.errors import ProbeFailed
from hexaudio.domain.ports.probe import MediaProbePort

logger = get_logger(__name__)


class FFprobeAdapter(MediaProbePort):
    """
    Infrastructure adapter implementing MediaProbePort using `ffprobe`.

    `probe()` never raises: any failure is logged and degrades to
    `MediaMetadata.empty()`. Use `probe_strict()` to get the ProbeFailed.
    Stateless apart from configuration, so safe to share across threads.
    """

    def __init__(
        self,
        ffprobe_bin: Optional[str] = None,
        timeout_sec: Optional[int] = None,
        *,
        settings: Optional[Settings] = None,
    ):
        cfg = settings or get_settings()
        self.ffprobe_bin = ffprobe_bin or cfg.ffprobe_bin
        self.timeout_sec = timeout_sec if timeout_sec is not None else cfg.ffprobe_timeout_sec

    # ---- Port API -------------------------------------------------------------
    def probe(self, path: Path) -> MediaMetadata:
        try:
            return self.probe_strict(path)
        except ProbeFailed as e:
            logger.warning("Probe failed for %s, continuing with empty metadata: %s", path, e)
            return MediaMetadata.empty()

    def probe_strict(self, path: Path) -> MediaMetadata:
        if not path:
            raise ProbeFailed("No path provided to probe().")
        if not Path(path).is_file():
            raise ProbeFailed(f"File not found: {path}")

        cmd = build_ffprobe_cmd(path, ffprobe_bin=self.ffprobe_bin)
        logger.debug("ffprobe cmd: %s", " ".join(shlex.quote(p) for p in cmd))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_sec,
                check=False,  # we handle rc manually to attach stderr
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeFailed(f"ffprobe timed out after {self.timeout_sec}s", stderr=str(e)) from e
        except OSError as e:
            raise ProbeFailed("Failed to execute ffprobe (OS error)", stderr=str(e)) from e

        if proc.returncode != 0:
            raise ProbeFailed("ffprobe returned non-zero exit code", stderr=proc.stderr, rc=proc.returncode)

        try:
            data = json.loads(proc.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ProbeFailed("ffprobe produced invalid JSON", stderr=proc.stdout) from e
        if not isinstance(data, dict):
            raise ProbeFailed("ffprobe JSON is not an object", stderr=proc.stdout)

        return parse_ffprobe(data)
