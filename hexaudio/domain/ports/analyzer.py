from __future__ import annotations
from pathlib import Path
from typing import Protocol
from hexaudio.domain.entities.audio_quality import AudioQualityInfo


class QualityAnalyzerPort(Protocol):
    def analyze(self, audio_path: Path) -> AudioQualityInfo: ...
