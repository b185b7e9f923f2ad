# hexaudio/services/transcode/filter_graph.py
from __future__ import annotations

from typing import Iterable, List

from hexaudio.domain.entities.filter_stage import FilterStage, ParamValue
from hexaudio.domain.enums.filter_kind import FilterKind

# Typed stage -> ffmpeg audio filter name
FFMPEG_FILTERS = {
    FilterKind.denoise: "afftdn",
    FilterKind.loudness_normalize: "loudnorm",
    FilterKind.compress: "acompressor",
    FilterKind.equalize: "equalizer",
    FilterKind.highpass: "highpass",
    FilterKind.lowpass: "lowpass",
    FilterKind.limiter: "alimiter",
}

_SPECIAL = set(",;[]=:'\\")


def format_value(v: ParamValue) -> str:
    if isinstance(v, bool):
        return "1" if v else "0"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        return str(int(v)) if v.is_integer() else format(v, "g")
    s = str(v)
    if any(ch in _SPECIAL for ch in s):
        raise ValueError(f"filter parameter value {s!r} contains filtergraph syntax")
    return s


def render_stage(stage: FilterStage) -> str:
    """FilterStage -> `name=k=v:k=v` as understood by `-af`."""
    name = FFMPEG_FILTERS[stage.kind]
    if not stage.params:
        return name
    return name + "=" + ":".join(f"{k}={format_value(v)}" for k, v in stage.params)


def render_chain(stages: Iterable[FilterStage]) -> str:
    """Serialize an ordered stage list into one linear `-af` filter chain."""
    return ",".join(render_stage(s) for s in stages)


def render_list(stages: Iterable[FilterStage]) -> List[str]:
    return [render_stage(s) for s in stages]
