import pytest

from hexaudio.domain.entities.audio_quality import AudioQualityInfo


def test_defaults_mean_not_measured():
    info = AudioQualityInfo()
    assert info.measured == {}
    assert info.quality_score is None
    assert info.recommendations == ()


def test_merged_ignores_none_and_keeps_original():
    base = AudioQualityInfo(peak_level=-3.0)
    out = base.merged({"rms_level": -18.0, "snr": None})
    assert out.peak_level == -3.0
    assert out.rms_level == -18.0
    assert out.snr is None
    assert base.rms_level is None


def test_merged_rejects_unknown_and_assessment_keys():
    with pytest.raises(KeyError):
        AudioQualityInfo().merged({"loudness": -14})
    with pytest.raises(KeyError):
        AudioQualityInfo().merged({"quality_score": 100})


def test_from_metrics_and_as_dict():
    info = AudioQualityInfo.from_metrics({"silence_ratio": 0.25, "clipping": False})
    assert info.measured == {"silence_ratio": 0.25, "clipping": False}
    d = info.with_assessment(100, ["ok"]).as_dict()
    assert d["quality_score"] == 100
    assert d["recommendations"] == ["ok"]
    assert d["spectral_centroid"] is None


def test_metric_names_exclude_assessment():
    names = AudioQualityInfo.metric_names()
    assert "snr" in names and "zero_crossing_rate" in names
    assert "quality_score" not in names
    assert "recommendations" not in names
