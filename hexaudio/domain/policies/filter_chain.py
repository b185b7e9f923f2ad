# hexaudio/domain/policies/filter_chain.py
from __future__ import annotations

from typing import Iterable, List, Tuple

from hexaudio.domain.entities.filter_stage import FilterStage
from hexaudio.domain.enums.filter_kind import StageSlot


class FilterChainBuilder:
    """
    Collects typed stages and emits them in slot order:

        denoise -> loudness -> compressor -> equalizer -> speech band
        -> analysis-driven -> DC block -> limiter

    Stages sharing a slot keep the order they were added in, so callers may
    add in any order without breaking the chain contract.
    """

    def __init__(self) -> None:
        self._stages: List[Tuple[int, FilterStage]] = []

    def add(self, stage: FilterStage) -> "FilterChainBuilder":
        if not isinstance(stage, FilterStage):
            raise TypeError(f"expected FilterStage, got {type(stage).__name__}")
        self._stages.append((len(self._stages), stage))
        return self

    def extend(self, stages: Iterable[FilterStage]) -> "FilterChainBuilder":
        for s in stages:
            self.add(s)
        return self

    def __len__(self) -> int:
        return len(self._stages)

    def build(self) -> Tuple[FilterStage, ...]:
        ordered = sorted(self._stages, key=lambda pair: (int(pair[1].slot), pair[0]))
        return tuple(stage for _, stage in ordered)


def is_ordered(stages: Iterable[FilterStage]) -> bool:
    slots = [int(s.slot) for s in stages]
    return slots == sorted(slots)


def safety_tail() -> Tuple[FilterStage, FilterStage]:
    """DC-offset removal followed by the output limiter (~ -0.45 dB headroom)."""
    return (
        FilterStage.highpass(20, slot=StageSlot.dc_block, label="DC offset removal"),
        FilterStage.limiter(0.95, 0.95, slot=StageSlot.limiter, label="safety limiter"),
    )
