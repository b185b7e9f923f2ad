from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Protocol

from hexaudio.services.schemas.options import ExtractionOptions

ProgressCallback = Callable[[float], None]


class AudioTranscoderPort(Protocol):
    def extract_audio(
        self,
        source: Path,
        options: ExtractionOptions,
        output_path: Path,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Path: ...
