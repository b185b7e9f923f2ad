# hexaudio/domain/entities/enhancement.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.entities.filter_stage import FilterStage
from hexaudio.domain.enums.audio_format import AudioFormat
from hexaudio.domain.enums.filter_kind import StageSlot

_FIXED_SLOTS = (StageSlot.dc_block, StageSlot.limiter)


@dataclass(frozen=True)
class EnhancementPlan:
    """Read-only instruction handed to the executor: ordered stages + output targets."""
    stages: Tuple[FilterStage, ...]
    output_format: AudioFormat = AudioFormat.WAV
    sample_rate: int = 16000
    channels: int = 1
    bitrate: Optional[int] = None  # kbps, lossy formats only

    @property
    def stage_names(self) -> List[str]:
        return [s.name for s in self.stages]

    @property
    def optional_stages(self) -> Tuple[FilterStage, ...]:
        """Stages chosen by options or analysis (everything except the fixed safety tail)."""
        return tuple(s for s in self.stages if s.slot not in _FIXED_SLOTS)

    @property
    def descriptions(self) -> List[str]:
        out: List[str] = []
        for s in self.optional_stages:
            prefix = "Applied automatic " if s.slot == StageSlot.analysis else "Applied "
            text = f"{prefix}{s.label}"
            if text not in out:
                out.append(text)
        return out


@dataclass(frozen=True)
class EnhancementResult:
    original_path: Path
    enhanced_path: Path
    improvements: Tuple[str, ...] = ()
    quality_before: Optional[AudioQualityInfo] = None
    quality_after: Optional[AudioQualityInfo] = None
    processing_time: float = 0.0  # seconds, wall clock
    plan: Optional[EnhancementPlan] = field(default=None, compare=False, repr=False)

    @property
    def quality_improvement(self) -> Optional[float]:
        """after.score - before.score; derived on every access."""
        if self.quality_before is None or self.quality_after is None:
            return None
        before, after = self.quality_before.quality_score, self.quality_after.quality_score
        if before is None or after is None:
            return None
        return after - before

    def as_dict(self) -> Dict[str, Any]:
        return {
            "original_path": str(self.original_path),
            "enhanced_path": str(self.enhanced_path),
            "improvements": list(self.improvements),
            "quality_before": self.quality_before.as_dict() if self.quality_before else None,
            "quality_after": self.quality_after.as_dict() if self.quality_after else None,
            "quality_improvement": self.quality_improvement,
            "processing_time": self.processing_time,
        }
