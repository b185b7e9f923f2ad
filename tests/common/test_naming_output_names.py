import re

import pytest

from hexaudio.common.naming.output_names import new_unique_id, output_filename, partial_path_for


def test_new_unique_id_is_hex_and_varies():
    ids = {new_unique_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(re.fullmatch(r"[0-9a-f]{32}", i) for i in ids)


def test_output_filename_shape():
    assert output_filename("ab12", "audio", "wav") == "ab12_audio.wav"
    assert output_filename("ab12", "Enhanced Mix", ".MP3") == "ab12_enhanced-mix.mp3"


@pytest.mark.parametrize("uid,purpose", [("", "audio"), ("ab12", ""), ("ab12", "***")])
def test_output_filename_rejects_empty_parts(uid, purpose):
    with pytest.raises(ValueError):
        output_filename(uid, purpose, "wav")


def test_partial_path_is_hidden_sibling_with_same_suffix(tmp_path):
    final = tmp_path / "ab12_audio.wav"
    partial = partial_path_for(final)
    assert partial.parent == tmp_path
    assert partial.name.startswith(".ab12_audio.")
    assert partial.suffix == ".wav"
    assert partial != final
    assert partial_path_for(final) != partial
