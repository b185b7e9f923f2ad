# hexaudio/domain/entities/media_metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from hexaudio.domain.enums.stream_kind import StreamKind

_VIDEO_FIELDS = ("width", "height", "fps", "pixel_format")
_AUDIO_FIELDS = ("channels", "sample_rate", "channel_layout")


@dataclass(frozen=True)
class StreamInfo:
    """
    One elementary stream of a container. `kind` decides which optional
    fields may be set: video-only fields stay None on audio streams and
    vice versa; subtitle/data streams carry neither.
    """
    index: int
    codec: str
    kind: StreamKind
    duration: Optional[float] = None
    bitrate: Optional[int] = None
    language: Optional[str] = None
    # video
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[float] = None
    pixel_format: Optional[str] = None
    # audio
    channels: Optional[int] = None
    sample_rate: Optional[int] = None
    channel_layout: Optional[str] = None

    def __post_init__(self) -> None:
        foreign: Tuple[str, ...] = ()
        if self.kind != StreamKind.video:
            foreign += _VIDEO_FIELDS
        if self.kind != StreamKind.audio:
            foreign += _AUDIO_FIELDS
        set_foreign = [f for f in foreign if getattr(self, f) is not None]
        if set_foreign:
            raise ValueError(f"{self.kind} stream cannot carry {', '.join(set_foreign)}")

    @property
    def is_audio(self) -> bool:
        return self.kind == StreamKind.audio

    @property
    def is_video(self) -> bool:
        return self.kind == StreamKind.video


@dataclass(frozen=True)
class MediaMetadata:
    """
    Immutable snapshot of one probe call. Every field may be absent;
    a failed probe yields `MediaMetadata.empty()`.
    """
    duration: Optional[float] = None
    container: Optional[str] = None
    bitrate: Optional[int] = None
    size_bytes: Optional[int] = None
    streams: Tuple[StreamInfo, ...] = ()
    format_long_name: Optional[str] = None
    # Raw ffprobe payload for debugging; excluded from equality
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def empty(cls) -> "MediaMetadata":
        return cls()

    @property
    def is_empty(self) -> bool:
        return (
            self.duration is None
            and self.container is None
            and self.bitrate is None
            and self.size_bytes is None
            and not self.streams
        )

    @property
    def audio_streams(self) -> Tuple[StreamInfo, ...]:
        return tuple(s for s in self.streams if s.is_audio)

    @property
    def video_streams(self) -> Tuple[StreamInfo, ...]:
        return tuple(s for s in self.streams if s.is_video)

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_streams)

    @property
    def has_video(self) -> bool:
        return bool(self.video_streams)

    @property
    def primary_audio(self) -> Optional[StreamInfo]:
        a = self.audio_streams
        return a[0] if a else None

    @property
    def primary_video(self) -> Optional[StreamInfo]:
        v = self.video_streams
        return v[0] if v else None
