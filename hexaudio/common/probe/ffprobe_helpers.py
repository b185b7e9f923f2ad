# hexaudio/common/probe/ffprobe_helpers.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from hexaudio.domain.entities.media_metadata import MediaMetadata, StreamInfo
from hexaudio.domain.enums.stream_kind import StreamKind


def build_ffprobe_cmd(
    input_path: str | Path,
    *,
    ffprobe_bin: str = "ffprobe",
    extra_args: Iterable[str] | None = None,
) -> List[str]:
    """
    Build an ffprobe command that emits JSON we can parse consistently.
    """
    base = [
        ffprobe_bin,
        "-v", "error",
        "-show_streams",
        "-show_format",
        "-print_format", "json",
    ]
    if extra_args:
        base += list(extra_args)
    # Stop option parsing in case of weird filenames
    return base + ["--", str(input_path)]


def parse_frame_rate(rate: Any) -> Optional[float]:
    """
    "30000/1001" -> 29.97, "25" -> 25.0. A zero denominator or an
    unparseable value yields None ("0/0" is what ffprobe prints for audio).
    """
    if rate is None:
        return None
    s = str(rate).strip()
    if not s:
        return None
    try:
        if "/" in s:
            num, den = s.split("/", 1)
            n, d = float(num), float(den)
            if d == 0:
                return None
            return n / d
        return float(s)
    except ValueError:
        return None


def maybe_int(x: Any) -> Optional[int]:
    try:
        if x is None or x == "N/A":
            return None
        return int(float(x))
    except (TypeError, ValueError):
        return None


def maybe_float(x: Any) -> Optional[float]:
    try:
        if x is None or x == "N/A":
            return None
        return float(x)
    except (TypeError, ValueError):
        return None


def parse_stream(stream: Dict[str, Any], position: int) -> StreamInfo:
    kind = StreamKind.from_codec_type(stream.get("codec_type"))
    tags = stream.get("tags") or {}
    index = maybe_int(stream.get("index"))
    common: Dict[str, Any] = dict(
        index=index if index is not None else position,
        codec=stream.get("codec_name") or "unknown",
        kind=kind,
        duration=maybe_float(stream.get("duration")),
        bitrate=maybe_int(stream.get("bit_rate")),
        language=tags.get("language") if isinstance(tags, dict) else None,
    )
    if kind == StreamKind.video:
        fps = parse_frame_rate(stream.get("avg_frame_rate"))
        if fps is None:
            fps = parse_frame_rate(stream.get("r_frame_rate"))
        common.update(
            width=maybe_int(stream.get("width")),
            height=maybe_int(stream.get("height")),
            fps=fps,
            pixel_format=stream.get("pix_fmt"),
        )
    elif kind == StreamKind.audio:
        common.update(
            channels=maybe_int(stream.get("channels")),
            sample_rate=maybe_int(stream.get("sample_rate")),
            channel_layout=stream.get("channel_layout"),
        )
    return StreamInfo(**common)


def parse_ffprobe(data: Dict[str, Any]) -> MediaMetadata:
    """
    ffprobe JSON -> MediaMetadata. Safe to call in unit tests with fixture JSON.
    """
    fmt = (data or {}).get("format") or {}
    raw_streams = (data or {}).get("streams") or []
    streams = tuple(parse_stream(s, i) for i, s in enumerate(raw_streams) if isinstance(s, dict))

    duration = maybe_float(fmt.get("duration"))
    if duration is None:
        # fallback: longest stream
        durs = [s.duration for s in streams if s.duration is not None]
        duration = max(durs) if durs else None

    bitrate = maybe_int(fmt.get("bit_rate"))
    if bitrate is None:
        rates = [s.bitrate for s in streams if s.bitrate is not None]
        bitrate = sum(rates) if rates else None

    return MediaMetadata(
        duration=duration,
        container=fmt.get("format_name"),
        bitrate=bitrate,
        size_bytes=maybe_int(fmt.get("size")),
        streams=streams,
        format_long_name=fmt.get("format_long_name"),
        raw=data or {},
    )
