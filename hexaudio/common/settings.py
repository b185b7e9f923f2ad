# hexaudio/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from hexaudio.common.strings.splitters import csv_to_list


class ConcurrencyConfig(BaseModel):
    batch_concurrency: int = Field(3, ge=1, le=64, description="Files processed per batch wave")
    analysis_workers: int = Field(3, ge=1, le=3, description="Threads for the three analysis passes")


class AnalysisConfig(BaseModel):
    silence_noise_db: float = Field(-30.0, le=0, description="silencedetect noise floor (dBFS)")
    silence_min_duration: float = Field(0.5, gt=0, description="Shortest gap counted as silence (s)")
    spectral_sample_rate: int = Field(16000, ge=8000, le=192000)
    spectral_window: int = Field(2048, ge=32, le=65536)
    clip_peak_db: float = Field(-0.1, le=0, description="Peak at/above this counts as full scale")


class RetentionConfig(BaseModel):
    max_age_hours: float = Field(24.0, gt=0)


class Settings(BaseSettings):
    # -------- Logging --------
    log_level: str = "INFO"

    # -------- Paths & layout --------
    data_root: Path = Path("./data")
    upload_subdir: str = "uploads"
    audio_subdir: str = "uploads/audio"
    temp_subdir: str = ".tmp"

    # Optional absolute overrides (leave empty to use DATA_ROOT + subdir)
    upload_root_override: Optional[Path] = Field(
        default=None, validation_alias=AliasChoices("UPLOAD_DIR", "upload_root_override")
    )
    audio_root_override: Optional[Path] = Field(
        default=None, validation_alias=AliasChoices("AUDIO_DIR", "audio_root_override")
    )

    # -------- External engine --------
    ffmpeg_bin: str = Field(default="ffmpeg", validation_alias=AliasChoices("FFMPEG_PATH", "ffmpeg_bin"))
    ffprobe_bin: str = Field(default="ffprobe", validation_alias=AliasChoices("FFPROBE_PATH", "ffprobe_bin"))
    # None = no artificial limit; the caller owns request-level timeouts
    ffmpeg_timeout_sec: Optional[int] = Field(None, ge=1)
    ffprobe_timeout_sec: Optional[int] = Field(30, ge=1)

    # -------- Input acceptance --------
    max_file_size_mb: int = Field(500, ge=1)
    supported_input_exts: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "mp4", "avi", "mov", "mkv", "webm", "flv", "wmv", "m4v",
            "mp3", "wav", "m4a", "flac", "aac", "ogg", "wma",
        ]
    )

    # -------- Sub-configs --------
    concurrency: ConcurrencyConfig = ConcurrencyConfig()
    analysis: AnalysisConfig = AnalysisConfig()
    retention: RetentionConfig = RetentionConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("supported_input_exts", mode="before")
    @classmethod
    def _split_csv(cls, v):
        return csv_to_list(v)

    # ===== Derived paths =====
    @computed_field  # type: ignore[misc]
    @property
    def upload_root(self) -> Path:
        if self.upload_root_override:
            return Path(self.upload_root_override)
        return self.data_root / self.upload_subdir

    @computed_field  # type: ignore[misc]
    @property
    def audio_root(self) -> Path:
        if self.audio_root_override:
            return Path(self.audio_root_override)
        return self.data_root / self.audio_subdir

    @computed_field  # type: ignore[misc]
    @property
    def temp_root(self) -> Path:
        return self.data_root / self.temp_subdir

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached) for scripts and default wiring:
        from hexaudio.common.settings import get_settings
        cfg = get_settings()
    Directories are NOT created here; MediaPipelineService does that once at construction.
    """
    return Settings()
