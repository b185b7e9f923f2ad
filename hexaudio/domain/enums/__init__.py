from hexaudio.domain.enums.audio_format import AudioFormat
from hexaudio.domain.enums.filter_kind import FilterKind, StageSlot
from hexaudio.domain.enums.stream_kind import StreamKind

__all__ = [
    "AudioFormat",
    "FilterKind",
    "StageSlot",
    "StreamKind",
]
