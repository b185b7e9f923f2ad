# hexaudio/domain/entities/audio_quality.py
from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class AudioQualityInfo:
    """
    Objective measurements of one audio file plus the synthesized assessment.

    Every metric is optional: None means "not measured", never zero.
    Instances are never updated in place; use `merged()` / `with_assessment()`
    to derive a successor.
    """
    snr: Optional[float] = None                 # dB
    dynamic_range: Optional[float] = None       # dB
    peak_level: Optional[float] = None          # dBFS, <= 0 expected
    rms_level: Optional[float] = None           # dBFS
    clipping: Optional[bool] = None
    silence_ratio: Optional[float] = None       # 0.0 .. 1.0 of total duration
    spectral_centroid: Optional[float] = None   # Hz
    spectral_rolloff: Optional[float] = None    # Hz
    zero_crossing_rate: Optional[float] = None
    quality_score: Optional[float] = None       # 0 .. 100
    recommendations: Tuple[str, ...] = ()

    @classmethod
    def metric_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name not in ("quality_score", "recommendations"))

    @classmethod
    def from_metrics(cls, metrics: Mapping[str, Any]) -> "AudioQualityInfo":
        """Build from a partial metric mapping; unknown keys are rejected."""
        unknown = set(metrics) - set(cls.metric_names())
        if unknown:
            raise KeyError(f"unknown quality metrics: {sorted(unknown)}")
        return cls(**dict(metrics))

    def merged(self, metrics: Mapping[str, Any]) -> "AudioQualityInfo":
        """New instance with `metrics` laid over this one (None values are ignored)."""
        updates = {k: v for k, v in metrics.items() if v is not None}
        unknown = set(updates) - set(self.metric_names())
        if unknown:
            raise KeyError(f"unknown quality metrics: {sorted(unknown)}")
        return replace(self, **updates)

    def with_assessment(self, score: float, recommendations: Tuple[str, ...] | list[str]) -> "AudioQualityInfo":
        return replace(self, quality_score=score, recommendations=tuple(recommendations))

    @property
    def measured(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.metric_names() if getattr(self, name) is not None}

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["recommendations"] = list(self.recommendations)
        return d
