# hexaudio/domain/enums/filter_kind.py
from __future__ import annotations

from enum import IntEnum, StrEnum


class FilterKind(StrEnum):
    denoise = "denoise"
    loudness_normalize = "loudness-normalize"
    compress = "compress"
    equalize = "equalize"
    highpass = "highpass"
    lowpass = "lowpass"
    limiter = "limiter"


class StageSlot(IntEnum):
    """
    Position group of a stage inside an enhancement chain.
    Stages are emitted in ascending slot order; within a slot, in insertion order.
    """
    denoise = 10
    loudness = 20
    compressor = 30
    equalizer = 40
    speech_band = 50
    analysis = 60
    dc_block = 70
    limiter = 80
