# hexaudio/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class HexAudioError(RuntimeError):
    """Base for pipeline errors. Carries the engine diagnostic when there is one."""
    message: str
    stderr: Optional[str] = None
    rc: Optional[int] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.message}: {_tail(self.stderr)}"
        return self.message


class ProbeFailed(HexAudioError):
    """Metadata probe failed. Logged and degraded to empty metadata; never fatal."""


class TranscodeFailed(HexAudioError):
    """Extraction/transcode failed (engine error, bad input, missing audio stream). Fatal to one run."""


class AnalysisFailed(HexAudioError):
    """One measurement pass failed. Fatal only when every pass fails."""


class ValidationFailed(ValueError):
    """Caller supplied an out-of-range or unknown parameter; raised before any subprocess is spawned."""


def _tail(text: str, max_lines: int = 8) -> str:
    lines = [ln for ln in text.strip().splitlines() if ln.strip()]
    return " | ".join(lines[-max_lines:])
