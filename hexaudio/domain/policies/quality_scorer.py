# hexaudio/domain/policies/quality_scorer.py
from __future__ import annotations

from typing import List, Optional

from hexaudio.domain.entities.audio_quality import AudioQualityInfo

# ---- interpretive thresholds ------------------------------------------------
SNR_EXCELLENT_DB = 20.0
SNR_POOR_DB = 10.0

PEAK_SEVERE_CLIP_DB = -1.0
PEAK_MILD_CLIP_DB = -3.0
PEAK_TOO_QUIET_DB = -20.0

DR_NARROW_DB = 10.0
DR_WIDE_DB = 60.0

SILENCE_RATIO_MAX = 0.3

LOW_SCORE = 60

# ---- penalties ----------------------------------------------------------------
PENALTY_SEVERE_CLIP = 30
PENALTY_MILD_CLIP = 20
PENALTY_TOO_QUIET = 10
PENALTY_NARROW_DR = 20
PENALTY_WIDE_DR = 10
PENALTY_SILENCE = 15
PENALTY_CLIPPING_FLAG = 25

# ---- recommendation texts ------------------------------------------------------
REC_LOW_SCORE = "Overall audio quality is low; enhancement processing is recommended."
REC_SEVERE_CLIP = "Severe clipping detected (peak above -1 dBFS); reduce the input gain."
REC_MILD_CLIP = "Mild clipping risk (peak above -3 dBFS); lower the volume slightly."
REC_CLIPPING_FLAG = "Clipping distortion detected; re-record or apply clipping repair."
REC_TOO_QUIET = "Audio level is too low (peak below -20 dBFS); raise the volume."
REC_NARROW_DR = "Dynamic range is too narrow (below 10 dB); the audio looks over-compressed, reduce compression."
REC_WIDE_DR = "Dynamic range is excessively wide (above 60 dB); consider a compressor to even out levels."
REC_SILENCE = "Too much silence (over 30% of the duration); consider detecting and trimming silent parts."
REC_GOOD = "Audio quality is good; no action needed."
REC_ANALYSIS_FAILED = "Audio quality analysis failed; check the file format."


def score_quality(info: AudioQualityInfo) -> int:
    """
    Deterministic 0..100 score. Penalties are subtracted independently per
    metric; absent metrics contribute nothing.
    """
    score = 100

    peak = info.peak_level
    if peak is not None:
        if peak > PEAK_SEVERE_CLIP_DB:
            score -= PENALTY_SEVERE_CLIP
        elif peak > PEAK_MILD_CLIP_DB:
            score -= PENALTY_MILD_CLIP
        elif peak < PEAK_TOO_QUIET_DB:
            score -= PENALTY_TOO_QUIET

    dr = info.dynamic_range
    if dr is not None:
        if dr < DR_NARROW_DB:
            score -= PENALTY_NARROW_DR
        elif dr > DR_WIDE_DB:
            score -= PENALTY_WIDE_DR

    if info.silence_ratio is not None and info.silence_ratio > SILENCE_RATIO_MAX:
        score -= PENALTY_SILENCE

    # Independent of the peak-based checks; both may apply.
    if info.clipping:
        score -= PENALTY_CLIPPING_FLAG

    return max(0, min(100, score))


def build_recommendations(info: AudioQualityInfo, score: Optional[float] = None) -> List[str]:
    """
    Advice in fixed priority order: low score, clipping, low level,
    dynamic range, silence. Falls back to a single "good" message.
    """
    if score is None:
        score = score_quality(info)
    recs: List[str] = []

    if score < LOW_SCORE:
        recs.append(REC_LOW_SCORE)

    peak = info.peak_level
    if peak is not None:
        if peak > PEAK_SEVERE_CLIP_DB:
            recs.append(REC_SEVERE_CLIP)
        elif peak > PEAK_MILD_CLIP_DB:
            recs.append(REC_MILD_CLIP)
    if info.clipping:
        recs.append(REC_CLIPPING_FLAG)

    if peak is not None and peak < PEAK_TOO_QUIET_DB:
        recs.append(REC_TOO_QUIET)

    dr = info.dynamic_range
    if dr is not None:
        if dr < DR_NARROW_DB:
            recs.append(REC_NARROW_DR)
        elif dr > DR_WIDE_DB:
            recs.append(REC_WIDE_DR)

    if info.silence_ratio is not None and info.silence_ratio > SILENCE_RATIO_MAX:
        recs.append(REC_SILENCE)

    if not recs:
        recs.append(REC_GOOD)
    return recs


def assess(info: AudioQualityInfo) -> AudioQualityInfo:
    """Return a successor of `info` carrying score and recommendations."""
    score = score_quality(info)
    return info.with_assessment(score, build_recommendations(info, score))


def analysis_failed() -> AudioQualityInfo:
    return AudioQualityInfo(quality_score=0, recommendations=(REC_ANALYSIS_FAILED,))


# ---- interpretive labels --------------------------------------------------------
def rate_snr(snr: Optional[float]) -> Optional[str]:
    if snr is None:
        return None
    if snr >= SNR_EXCELLENT_DB:
        return "excellent"
    if snr >= SNR_POOR_DB:
        return "acceptable"
    return "poor"  # needs noise reduction


def rate_peak_level(peak: Optional[float]) -> Optional[str]:
    if peak is None:
        return None
    if peak > PEAK_SEVERE_CLIP_DB:
        return "severe-clipping"
    if peak > PEAK_MILD_CLIP_DB:
        return "mild-clipping"
    if peak < PEAK_TOO_QUIET_DB:
        return "too-quiet"
    return "ok"


def rate_dynamic_range(dr: Optional[float]) -> Optional[str]:
    if dr is None:
        return None
    if dr < DR_NARROW_DB:
        return "over-compressed"
    if dr > DR_WIDE_DB:
        return "excessively-wide"
    return "ok"


def rate_silence(ratio: Optional[float]) -> Optional[str]:
    if ratio is None:
        return None
    return "too-much-silence" if ratio > SILENCE_RATIO_MAX else "ok"
