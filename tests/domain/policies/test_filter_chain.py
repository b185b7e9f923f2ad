import pytest

from hexaudio.domain.entities.filter_stage import FilterStage
from hexaudio.domain.enums.filter_kind import StageSlot
from hexaudio.domain.policies.filter_chain import FilterChainBuilder, is_ordered, safety_tail


def test_builder_orders_by_slot_regardless_of_insertion():
    tail = safety_tail()
    eq = FilterStage.equalizer_band(100, 3)
    denoise = FilterStage.denoise()
    built = FilterChainBuilder().extend(tail).add(eq).add(denoise).build()
    assert built == (denoise, eq, *tail)
    assert is_ordered(built)


def test_builder_is_stable_within_a_slot():
    high = FilterStage.equalizer_band(8000, 1)
    low = FilterStage.equalizer_band(100, 1)
    built = FilterChainBuilder().add(high).add(low).build()
    assert built == (high, low)


def test_builder_rejects_raw_filter_strings():
    with pytest.raises(TypeError):
        FilterChainBuilder().add("highpass=f=20")


def test_empty_builder():
    b = FilterChainBuilder()
    assert len(b) == 0
    assert b.build() == ()


def test_is_ordered_detects_misplaced_limiter():
    dc, lim = safety_tail()
    assert not is_ordered([lim, dc])


def test_safety_tail_slots():
    dc, lim = safety_tail()
    assert (dc.slot, lim.slot) == (StageSlot.dc_block, StageSlot.limiter)
