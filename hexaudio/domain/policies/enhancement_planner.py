# hexaudio/domain/policies/enhancement_planner.py
from __future__ import annotations

from typing import List, Optional

from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.entities.enhancement import EnhancementPlan
from hexaudio.domain.entities.filter_stage import FilterStage
from hexaudio.domain.enums.filter_kind import StageSlot
from hexaudio.domain.policies.filter_chain import FilterChainBuilder, safety_tail
from hexaudio.services.schemas.options import EnhancementOptions, EqualizerSettings

# Analysis-driven triggers
LOW_CENTROID_HZ = 500.0      # below this, suspect low-frequency rumble
NARROW_DR_DB = 15.0          # below this, only a gentle compressor is safe

RUMBLE_HIGHPASS_HZ = 80.0
SPEECH_HIGHPASS_HZ = 80.0
SPEECH_LOWPASS_HZ = 8000.0


def plan_enhancement(
    options: Optional[EnhancementOptions] = None,
    quality: Optional[AudioQualityInfo] = None,
) -> EnhancementPlan:
    """
    Pure function: options (+ optional prior measurements) -> ordered plan.

    Manual stages come from the toggles in `options`. When `enhance_audio`
    is set and `quality` is given, stages are added from the measurements.
    The DC block and safety limiter are always the last two stages.
    """
    opts = options or EnhancementOptions()
    chain = FilterChainBuilder()

    if opts.noise_reduction:
        chain.add(FilterStage.denoise(-25))
    if opts.volume_normalization:
        chain.add(FilterStage.loudness_normalize(-16, -1.5, 11))
    if opts.compressor:
        chain.add(FilterStage.compressor(threshold=0.089, ratio=9, attack=200, release=1000))
    if opts.equalizer is not None:
        chain.extend(equalizer_stages(opts.equalizer))
    if opts.speech_enhancement:
        chain.add(FilterStage.highpass(SPEECH_HIGHPASS_HZ, slot=StageSlot.speech_band, label="speech band filtering"))
        chain.add(FilterStage.lowpass(SPEECH_LOWPASS_HZ, slot=StageSlot.speech_band, label="speech band filtering"))

    if opts.enhance_audio and quality is not None:
        chain.extend(analysis_stages(quality))

    chain.extend(safety_tail())

    return EnhancementPlan(
        stages=chain.build(),
        output_format=opts.output_format,
        sample_rate=opts.sample_rate,
        channels=opts.channels,
        bitrate=opts.bitrate if opts.output_format.is_lossy else None,
    )


def equalizer_stages(eq: EqualizerSettings) -> List[FilterStage]:
    """low / mid / high bands, each only when its gain is set."""
    out: List[FilterStage] = []
    if eq.low_gain is not None:
        out.append(FilterStage.equalizer_band(eq.low_freq, eq.low_gain, eq.width, label="equalizer adjustments"))
    if eq.mid_gain is not None:
        out.append(FilterStage.equalizer_band(eq.mid_freq, eq.mid_gain, eq.width, label="equalizer adjustments"))
    if eq.high_gain is not None:
        out.append(FilterStage.equalizer_band(eq.high_freq, eq.high_gain, eq.width, label="equalizer adjustments"))
    return out


def analysis_stages(quality: AudioQualityInfo) -> List[FilterStage]:
    out: List[FilterStage] = []
    if quality.spectral_centroid is not None and quality.spectral_centroid < LOW_CENTROID_HZ:
        out.append(
            FilterStage.highpass(RUMBLE_HIGHPASS_HZ, slot=StageSlot.analysis, label="low-frequency rumble removal")
        )
    if quality.dynamic_range is not None and quality.dynamic_range < NARROW_DR_DB:
        out.append(
            FilterStage.compressor(
                threshold=0.125, ratio=4, attack=5, release=50,
                slot=StageSlot.analysis, label="gentle compression",
            )
        )
    if quality.clipping:
        out.append(FilterStage.limiter(0.9, 0.9, slot=StageSlot.analysis, label="clipping repair limiter"))
    return out
