# tests/domain/policies/test_enhancement_planner.py
from __future__ import annotations

from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.enums.audio_format import AudioFormat
from hexaudio.domain.enums.filter_kind import FilterKind, StageSlot
from hexaudio.domain.policies.enhancement_planner import analysis_stages, plan_enhancement
from hexaudio.domain.policies.filter_chain import is_ordered
from hexaudio.services.schemas.options import EnhancementOptions, EqualizerSettings

_BAD_QUALITY = AudioQualityInfo(spectral_centroid=300, dynamic_range=10, clipping=True)


def test_all_toggles_off_yields_exactly_the_safety_tail():
    plan = plan_enhancement(EnhancementOptions())
    assert [s.kind for s in plan.stages] == [FilterKind.highpass, FilterKind.limiter]
    dc, limiter = plan.stages
    assert dc.slot == StageSlot.dc_block and dc.param("f") == 20
    assert limiter.slot == StageSlot.limiter
    assert limiter.param("level_out") == 0.95 and limiter.param("limit") == 0.95
    assert plan.descriptions == []


def test_none_options_behave_like_defaults():
    assert plan_enhancement(None) == plan_enhancement(EnhancementOptions())


def test_everything_on_is_emitted_in_chain_order():
    opts = EnhancementOptions(
        noise_reduction=True,
        volume_normalization=True,
        compressor=True,
        equalizer=EqualizerSettings(low_gain=3, mid_gain=-2, high_gain=4),
        speech_enhancement=True,
        enhance_audio=True,
    )
    plan = plan_enhancement(opts, _BAD_QUALITY)

    assert [s.kind for s in plan.stages] == [
        FilterKind.denoise,
        FilterKind.loudness_normalize,
        FilterKind.compress,
        FilterKind.equalize,
        FilterKind.equalize,
        FilterKind.equalize,
        FilterKind.highpass,    # speech band
        FilterKind.lowpass,
        FilterKind.highpass,    # rumble
        FilterKind.compress,    # gentle
        FilterKind.limiter,     # clipping repair
        FilterKind.highpass,    # DC block
        FilterKind.limiter,     # safety
    ]
    assert is_ordered(plan.stages)
    assert [s.param("f") for s in plan.stages if s.kind == FilterKind.equalize] == [100, 1000, 8000]


def test_manual_parameters():
    opts = EnhancementOptions(noise_reduction=True, volume_normalization=True, compressor=True)
    denoise, loud, comp = plan_enhancement(opts).optional_stages
    assert denoise.param("nf") == -25
    assert (loud.param("I"), loud.param("TP"), loud.param("LRA")) == (-16, -1.5, 11)
    assert (comp.param("threshold"), comp.param("ratio"), comp.param("attack"), comp.param("release")) == (
        0.089, 9, 200, 1000,
    )


def test_analysis_stages_require_enhance_audio_and_quality():
    assert plan_enhancement(EnhancementOptions(enhance_audio=True)).optional_stages == ()
    assert plan_enhancement(EnhancementOptions(), _BAD_QUALITY).optional_stages == ()
    assert len(plan_enhancement(EnhancementOptions(enhance_audio=True), _BAD_QUALITY).optional_stages) == 3


def test_analysis_stage_triggers():
    assert analysis_stages(AudioQualityInfo()) == []
    assert analysis_stages(AudioQualityInfo(spectral_centroid=500, dynamic_range=15, clipping=False)) == []

    (rumble,) = analysis_stages(AudioQualityInfo(spectral_centroid=120))
    assert rumble.kind == FilterKind.highpass and rumble.param("f") == 80

    (gentle,) = analysis_stages(AudioQualityInfo(dynamic_range=12))
    assert gentle.slot == StageSlot.analysis
    assert (gentle.param("threshold"), gentle.param("ratio")) == (0.125, 4)

    (lim,) = analysis_stages(AudioQualityInfo(clipping=True))
    assert (lim.param("level_out"), lim.param("limit")) == (0.9, 0.9)


def test_single_equalizer_band():
    plan = plan_enhancement(EnhancementOptions(equalizer=EqualizerSettings(mid_gain=2.5, mid_freq=1500)))
    (band,) = plan.optional_stages
    assert band.param("f") == 1500
    assert band.param("g") == 2.5
    assert band.param("width") == 200


def test_descriptions_are_deduplicated_and_mark_automatic_stages():
    opts = EnhancementOptions(
        noise_reduction=True,
        equalizer=EqualizerSettings(low_gain=1, high_gain=1),
        speech_enhancement=True,
        enhance_audio=True,
    )
    plan = plan_enhancement(opts, AudioQualityInfo(spectral_centroid=200))
    assert plan.descriptions == [
        "Applied noise reduction",
        "Applied equalizer adjustments",
        "Applied speech band filtering",
        "Applied automatic low-frequency rumble removal",
    ]


def test_targets_and_bitrate_only_for_lossy():
    wav = plan_enhancement(EnhancementOptions(output_format=AudioFormat.WAV, bitrate=128, sample_rate=44100))
    assert wav.bitrate is None
    assert wav.sample_rate == 44100

    mp3 = plan_enhancement(EnhancementOptions(output_format=AudioFormat.MP3, bitrate=128, channels=2))
    assert mp3.bitrate == 128
    assert mp3.output_format == AudioFormat.MP3
    assert mp3.channels == 2


def test_planner_is_deterministic():
    opts = EnhancementOptions(compressor=True, enhance_audio=True)
    assert plan_enhancement(opts, _BAD_QUALITY) == plan_enhancement(opts, _BAD_QUALITY)
