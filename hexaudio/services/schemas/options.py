# hexaudio/services/schemas/options.py
from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from hexaudio.domain.entities.filter_stage import FilterStage
from hexaudio.domain.enums.audio_format import AudioFormat
from hexaudio.domain.errors import ValidationFailed

M = TypeVar("M", bound=BaseModel)

# Speech-recognition friendly defaults
SPEECH_SAMPLE_RATE = 16000
SPEECH_CHANNELS = 1
# Full-fidelity extraction
HIFI_SAMPLE_RATE = 44100
HIFI_CHANNELS = 2


class _Options(BaseModel):
    # Unknown keys are a construction error, never silently dropped.
    model_config = ConfigDict(extra="forbid", frozen=True)


class EqualizerSettings(_Options):
    """Three independent parametric bands; a band is active only when its gain is set."""
    low_gain: Optional[float] = Field(None, ge=-20, le=20, description="dB")
    mid_gain: Optional[float] = Field(None, ge=-20, le=20, description="dB")
    high_gain: Optional[float] = Field(None, ge=-20, le=20, description="dB")
    low_freq: float = Field(100, gt=0, le=24000, description="Hz")
    mid_freq: float = Field(1000, gt=0, le=24000, description="Hz")
    high_freq: float = Field(8000, gt=0, le=24000, description="Hz")
    width: float = Field(200, gt=0, le=24000, description="Band width in Hz")

    @property
    def is_empty(self) -> bool:
        return self.low_gain is None and self.mid_gain is None and self.high_gain is None


class ExtractionOptions(_Options):
    output_format: AudioFormat = AudioFormat.WAV
    sample_rate: int = Field(SPEECH_SAMPLE_RATE, ge=8000, le=192000)
    channels: int = Field(SPEECH_CHANNELS, ge=1, le=8)
    bitrate: Optional[int] = Field(None, ge=8, le=512, description="kbps; lossy formats only")
    max_duration: Optional[float] = Field(None, gt=0, description="Truncate output after N seconds")
    normalize_audio: bool = False
    filters: Tuple[FilterStage, ...] = ()

    @classmethod
    def hifi(cls, **overrides: Any) -> "ExtractionOptions":
        """44.1 kHz stereo extraction for callers that care about fidelity, not ASR."""
        params = {"sample_rate": HIFI_SAMPLE_RATE, "channels": HIFI_CHANNELS}
        params.update(overrides)
        return cls(**params)


class EnhancementOptions(_Options):
    # output targets
    output_format: AudioFormat = AudioFormat.WAV
    sample_rate: int = Field(SPEECH_SAMPLE_RATE, ge=8000, le=192000)
    channels: int = Field(SPEECH_CHANNELS, ge=1, le=8)
    bitrate: Optional[int] = Field(None, ge=8, le=512, description="kbps; lossy formats only")

    # manual stages
    noise_reduction: bool = False
    volume_normalization: bool = False
    compressor: bool = False
    equalizer: Optional[EqualizerSettings] = None
    speech_enhancement: bool = False

    # analysis
    enhance_audio: bool = False     # add stages derived from measured quality
    analyze_quality: bool = False   # measure before/after

    @property
    def has_manual_stages(self) -> bool:
        eq = self.equalizer is not None and not self.equalizer.is_empty
        return self.noise_reduction or self.volume_normalization or self.compressor or self.speech_enhancement or eq


class ProcessingOptions(_Options):
    """Options for one `process_media` run (and every file of a batch)."""
    extract_audio: bool = True
    audio_format: AudioFormat = AudioFormat.WAV
    sample_rate: Optional[int] = Field(None, ge=8000, le=192000)
    channels: Optional[int] = Field(None, ge=1, le=8)
    bitrate: Optional[int] = Field(None, ge=8, le=512)
    max_duration: Optional[float] = Field(None, gt=0)
    normalize_audio: bool = False
    hifi: bool = False

    analyze_quality: bool = False
    enhance_audio: bool = False
    noise_reduction: bool = False
    volume_normalization: bool = False
    compressor: bool = False
    equalizer: Optional[EqualizerSettings] = None
    speech_enhancement: bool = False

    @model_validator(mode="after")
    def _targets_consistent(self) -> "ProcessingOptions":
        if self.bitrate is not None and not self.audio_format.is_lossy:
            raise ValueError(f"bitrate only applies to lossy formats, not {self.audio_format}")
        return self

    def extraction(self) -> ExtractionOptions:
        rate = self.sample_rate or (HIFI_SAMPLE_RATE if self.hifi else SPEECH_SAMPLE_RATE)
        channels = self.channels or (HIFI_CHANNELS if self.hifi else SPEECH_CHANNELS)
        return ExtractionOptions(
            output_format=self.audio_format,
            sample_rate=rate,
            channels=channels,
            bitrate=self.bitrate,
            max_duration=self.max_duration,
            normalize_audio=self.normalize_audio,
        )

    def enhancement(self) -> EnhancementOptions:
        ext = self.extraction()
        return EnhancementOptions(
            output_format=ext.output_format,
            sample_rate=ext.sample_rate,
            channels=ext.channels,
            bitrate=ext.bitrate,
            noise_reduction=self.noise_reduction,
            volume_normalization=self.volume_normalization,
            compressor=self.compressor,
            equalizer=self.equalizer,
            speech_enhancement=self.speech_enhancement,
            enhance_audio=self.enhance_audio,
            analyze_quality=self.analyze_quality,
        )

    @property
    def wants_enhancement(self) -> bool:
        return self.enhance_audio or self.enhancement().has_manual_stages


def coerce_options(model: Type[M], value: M | Mapping[str, Any] | None) -> M:
    """
    Accept a model instance, a plain mapping or None and return a validated
    instance of `model`. Bad keys/values surface as ValidationFailed.
    """
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump(exclude_unset=True)
    if not isinstance(value, Mapping):
        raise ValidationFailed(f"{model.__name__} expects a mapping, got {type(value).__name__}")
    try:
        return model.model_validate(dict(value))
    except ValidationError as e:
        raise ValidationFailed(f"invalid {model.__name__}: {e}") from e
