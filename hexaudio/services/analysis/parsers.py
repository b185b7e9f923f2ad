# hexaudio/services/analysis/parsers.py
"""
Parse-or-absent readers for ffmpeg analysis output.

Each function takes raw engine text and returns only what it could read;
unrecognised lines are ignored, never raised on. Formats handled:

- astats summary (stderr, info level)::

    [Parsed_astats_0 @ 0x5581] Channel: 1
    [Parsed_astats_0 @ 0x5581] Peak level dB: -0.512
    [Parsed_astats_0 @ 0x5581] Overall
    [Parsed_astats_0 @ 0x5581] RMS level dB: -20.1

- aspectralstats frame metadata printed by ``ametadata=mode=print``::

    lavfi.aspectralstats.1.centroid=1843.2

- silencedetect (stderr)::

    [silencedetect @ 0x5581] silence_start: 1.25
    [silencedetect @ 0x5581] silence_end: 3.5 | silence_duration: 2.25

- final stats line (stderr): ``size=N/A time=00:00:12.48 bitrate=N/A``
"""
from __future__ import annotations

import math
import re
from statistics import fmean
from typing import Dict, List, Mapping, Optional, Tuple

_ASTATS_LINE = re.compile(r"\[Parsed_astats_\d+[^\]]*\]\s*(?P<body>.*?)\s*$")
_SPECTRAL = re.compile(r"lavfi\.aspectralstats\.\d+\.(?P<key>centroid|rolloff)=(?P<value>\S+)")
_SILENCE_START = re.compile(r"silence_start:\s*(?P<t>-?[\d.]+(?:e[-+]?\d+)?)")
_SILENCE_END = re.compile(r"silence_end:\s*(?P<t>-?[\d.]+(?:e[-+]?\d+)?)")
_STATS_TIME = re.compile(r"time=\s*(?P<h>\d+):(?P<m>\d{2}):(?P<s>\d{2}(?:\.\d+)?)")


def to_float(raw: Optional[str]) -> Optional[float]:
    """'-20.5' -> -20.5; '-inf', 'nan', 'N/A', garbage -> None."""
    if raw is None:
        return None
    try:
        v = float(raw.strip().split()[0])
    except (ValueError, IndexError):
        return None
    return v if math.isfinite(v) else None


# ---- astats --------------------------------------------------------------------
def parse_astats_sections(text: str) -> Tuple[Dict[str, str], List[Dict[str, str]]]:
    """Split an astats summary into (Overall, [Channel 1, Channel 2, ...]) raw key -> value maps."""
    overall: Dict[str, str] = {}
    channels: List[Dict[str, str]] = []
    current: Optional[Dict[str, str]] = None
    for line in text.splitlines():
        m = _ASTATS_LINE.search(line)
        if not m:
            continue
        body = m.group("body")
        if body == "Overall":
            current = overall
            continue
        if body.startswith("Channel:"):
            current = {}
            channels.append(current)
            continue
        key, sep, value = body.partition(":")
        if not sep or current is None:
            continue
        current[key.strip()] = value.strip()
    return overall, channels


def parse_astats(text: str) -> Dict[str, str]:
    """
    Return the astats 'Overall' section as raw key -> value strings.
    If no Overall header was printed, the last channel section is used.
    """
    overall, channels = parse_astats_sections(text)
    if overall:
        return overall
    return channels[-1] if channels else {}


def astats_value(stats: Mapping[str, str], key: str) -> Optional[float]:
    return to_float(stats.get(key))


def astats_overall_or_channel_mean(text: str, key: str) -> Optional[float]:
    """
    Overall value of `key`, else the mean over channels that report it.
    Some astats keys (e.g. 'Zero crossings rate') are printed per channel only.
    """
    overall, channels = parse_astats_sections(text)
    v = astats_value(overall, key)
    if v is not None:
        return v
    per_channel = [x for x in (astats_value(c, key) for c in channels) if x is not None]
    return fmean(per_channel) if per_channel else None


def parse_level_metrics(stderr: str) -> Dict[str, float]:
    """
    peak_level / rms_level straight from astats; dynamic_range as
    RMS peak - RMS trough (loudest vs quietest window); snr as
    RMS level - noise floor.
    """
    stats = parse_astats(stderr)
    out: Dict[str, float] = {}
    peak = astats_value(stats, "Peak level dB")
    rms = astats_value(stats, "RMS level dB")
    rms_peak = astats_value(stats, "RMS peak dB")
    rms_trough = astats_value(stats, "RMS trough dB")
    noise_floor = astats_value(stats, "Noise floor dB")

    if peak is not None:
        out["peak_level"] = peak
    if rms is not None:
        out["rms_level"] = rms
    if rms_peak is not None and rms_trough is not None:
        out["dynamic_range"] = max(0.0, rms_peak - rms_trough)
    if rms is not None and noise_floor is not None:
        out["snr"] = rms - noise_floor
    return out


def parse_clipping(stderr: str, clip_peak_db: float = -0.1) -> Optional[bool]:
    """
    Clipping = peak at full scale with flattened runs of samples there.
    None when astats printed no peak level.
    """
    stats = parse_astats(stderr)
    peak = astats_value(stats, "Peak level dB")
    if peak is None:
        return None
    if peak < clip_peak_db:
        return False
    flat = astats_value(stats, "Flat factor")
    if flat is None:
        return None
    return flat > 0


# ---- spectral --------------------------------------------------------------------
def parse_spectral_metrics(text: str) -> Dict[str, float]:
    """Mean centroid/rolloff over every frame and channel, plus the astats per-channel zero-crossing rate."""
    buckets: Dict[str, List[float]] = {"centroid": [], "rolloff": []}
    for m in _SPECTRAL.finditer(text):
        v = to_float(m.group("value"))
        if v is not None:
            buckets[m.group("key")].append(v)

    out: Dict[str, float] = {}
    if buckets["centroid"]:
        out["spectral_centroid"] = fmean(buckets["centroid"])
    if buckets["rolloff"]:
        out["spectral_rolloff"] = fmean(buckets["rolloff"])
    zcr = astats_overall_or_channel_mean(text, "Zero crossings rate")
    if zcr is not None:
        out["zero_crossing_rate"] = zcr
    return out


# ---- silence ----------------------------------------------------------------------
def parse_silence_intervals(stderr: str) -> List[Tuple[float, Optional[float]]]:
    """(start, end) pairs in order; the last end is None if silence ran to EOF."""
    intervals: List[Tuple[float, Optional[float]]] = []
    open_start: Optional[float] = None
    for line in stderr.splitlines():
        if "silencedetect" not in line:
            continue
        ms = _SILENCE_START.search(line)
        if ms:
            open_start = max(0.0, float(ms.group("t")))
            continue
        me = _SILENCE_END.search(line)
        if me:
            end = float(me.group("t"))
            intervals.append((open_start if open_start is not None else 0.0, end))
            open_start = None
    if open_start is not None:
        intervals.append((open_start, None))
    return intervals


def parse_media_time(stderr: str) -> Optional[float]:
    """Position of the last `time=` stats line, in seconds."""
    last = None
    for m in _STATS_TIME.finditer(stderr):
        last = m
    if last is None:
        return None
    return int(last.group("h")) * 3600 + int(last.group("m")) * 60 + float(last.group("s"))


def parse_silence_ratio(stderr: str, duration: Optional[float] = None) -> Optional[float]:
    """
    Fraction of the duration spent in detected silence, clamped to 0..1.
    Falls back to the engine's own final `time=` when no duration is given.
    """
    total = duration if duration and duration > 0 else parse_media_time(stderr)
    if not total or total <= 0:
        return None
    silent = 0.0
    for start, end in parse_silence_intervals(stderr):
        stop = end if end is not None else total
        silent += max(0.0, min(stop, total) - start)
    return max(0.0, min(1.0, silent / total))
