# hexaudio/domain/entities/processing.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.entities.enhancement import EnhancementResult
from hexaudio.domain.entities.media_metadata import MediaMetadata


@dataclass
class ProcessingResult:
    """
    Outcome of one pipeline run over one file. Built up during the run and
    handed to the caller at the end; nothing in hexaudio keeps a reference.
    """
    id: str
    source_path: Path
    metadata: MediaMetadata = field(default_factory=MediaMetadata.empty)
    audio_path: Optional[Path] = None
    quality: Optional[AudioQualityInfo] = None
    enhancements: List[str] = field(default_factory=list)
    enhancement: Optional[EnhancementResult] = None
    processing_time: float = 0.0  # seconds

    @property
    def processed_path(self) -> Path:
        return self.audio_path or self.source_path

    def as_dict(self) -> Dict[str, Any]:
        md = self.metadata
        return {
            "id": self.id,
            "source_path": str(self.source_path),
            "audio_path": str(self.audio_path) if self.audio_path else None,
            "metadata": {
                "duration": md.duration,
                "container": md.container,
                "bitrate": md.bitrate,
                "size_bytes": md.size_bytes,
                "streams": [
                    {k: (str(v) if k == "kind" else v) for k, v in vars(s).items() if v is not None}
                    for s in md.streams
                ],
            },
            "quality": self.quality.as_dict() if self.quality else None,
            "enhancements": list(self.enhancements),
            "enhancement": self.enhancement.as_dict() if self.enhancement else None,
            "processing_time": self.processing_time,
        }
