# hexaudio/domain/entities/filter_stage.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from hexaudio.domain.enums.filter_kind import FilterKind, StageSlot

ParamValue = Union[int, float, str]


@dataclass(frozen=True)
class FilterStage:
    """
    One typed stage of an audio filter chain. Parameters keep their insertion
    order so the serialized graph is reproducible.
    """
    kind: FilterKind
    slot: StageSlot
    params: Tuple[Tuple[str, ParamValue], ...] = ()
    label: str = ""

    def param(self, name: str) -> Optional[ParamValue]:
        for k, v in self.params:
            if k == name:
                return v
        return None

    @property
    def name(self) -> str:
        return str(self.kind)

    # ---- constructors -------------------------------------------------------
    @classmethod
    def denoise(cls, noise_floor_db: float = -25) -> "FilterStage":
        return cls(FilterKind.denoise, StageSlot.denoise, (("nf", noise_floor_db),), "noise reduction")

    @classmethod
    def loudness_normalize(
        cls, integrated: float = -16, true_peak: float = -1.5, loudness_range: float = 11
    ) -> "FilterStage":
        return cls(
            FilterKind.loudness_normalize,
            StageSlot.loudness,
            (("I", integrated), ("TP", true_peak), ("LRA", loudness_range)),
            "loudness normalization (EBU R128)",
        )

    @classmethod
    def compressor(
        cls,
        threshold: float,
        ratio: float,
        attack: float,
        release: float,
        *,
        slot: StageSlot = StageSlot.compressor,
        label: str = "dynamic range compression",
    ) -> "FilterStage":
        return cls(
            FilterKind.compress,
            slot,
            (("threshold", threshold), ("ratio", ratio), ("attack", attack), ("release", release)),
            label,
        )

    @classmethod
    def equalizer_band(cls, frequency: float, gain: float, width: float = 200, *, label: str = "") -> "FilterStage":
        return cls(
            FilterKind.equalize,
            StageSlot.equalizer,
            (("f", frequency), ("width_type", "h"), ("width", width), ("g", gain)),
            label or f"equalizer {frequency:g} Hz",
        )

    @classmethod
    def highpass(cls, frequency: float, *, slot: StageSlot, label: str = "") -> "FilterStage":
        return cls(FilterKind.highpass, slot, (("f", frequency),), label or f"high-pass {frequency:g} Hz")

    @classmethod
    def lowpass(cls, frequency: float, *, slot: StageSlot, label: str = "") -> "FilterStage":
        return cls(FilterKind.lowpass, slot, (("f", frequency),), label or f"low-pass {frequency:g} Hz")

    @classmethod
    def limiter(
        cls, level_out: float, limit: float, level_in: float = 1, *, slot: StageSlot, label: str = ""
    ) -> "FilterStage":
        return cls(
            FilterKind.limiter,
            slot,
            (("level_in", level_in), ("level_out", level_out), ("limit", limit)),
            label or "limiter",
        )
