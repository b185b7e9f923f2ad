# hexaudio/domain/enums/audio_format.py
from __future__ import annotations

from enum import StrEnum


class AudioFormat(StrEnum):
    WAV = "wav"
    MP3 = "mp3"
    FLAC = "flac"
    M4A = "m4a"
    OGG = "ogg"

    @property
    def codec(self) -> str:
        return _CODECS[self]

    @property
    def muxer(self) -> str:
        return _MUXERS[self]

    @property
    def is_lossy(self) -> bool:
        return self in (AudioFormat.MP3, AudioFormat.M4A, AudioFormat.OGG)


_CODECS = {
    AudioFormat.WAV: "pcm_s16le",
    AudioFormat.MP3: "libmp3lame",
    AudioFormat.FLAC: "flac",
    AudioFormat.M4A: "aac",
    AudioFormat.OGG: "libvorbis",
}

# Output is written to a ".partial" name, so the muxer can't be inferred from the extension.
_MUXERS = {
    AudioFormat.WAV: "wav",
    AudioFormat.MP3: "mp3",
    AudioFormat.FLAC: "flac",
    AudioFormat.M4A: "ipod",
    AudioFormat.OGG: "ogg",
}
