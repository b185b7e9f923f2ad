from hexaudio.common.probe.ffprobe_helpers import (
    build_ffprobe_cmd,
    maybe_float,
    maybe_int,
    parse_ffprobe,
    parse_frame_rate,
)
from hexaudio.domain.enums.stream_kind import StreamKind


def test_build_ffprobe_cmd_uses_json_flags(tmp_path):
    f = tmp_path / "-weird name.mp4"
    cmd = build_ffprobe_cmd(f, ffprobe_bin="/usr/bin/ffprobe")
    assert cmd[0] == "/usr/bin/ffprobe"
    assert "-show_streams" in cmd
    assert "-show_format" in cmd
    assert cmd[cmd.index("-print_format") + 1] == "json"
    # option parsing stops before the path
    assert cmd[-2:] == ["--", str(f)]


def test_parse_frame_rate():
    assert 29.96 < parse_frame_rate("30000/1001") < 29.98
    assert parse_frame_rate("25") == 25.0
    assert parse_frame_rate("0/0") is None
    assert parse_frame_rate("25/0") is None
    assert parse_frame_rate("") is None
    assert parse_frame_rate(None) is None
    assert parse_frame_rate("abc") is None


def test_maybe_numbers_treat_na_as_absent():
    assert maybe_int("128000") == 128000
    assert maybe_int("N/A") is None
    assert maybe_float("12.5") == 12.5
    assert maybe_float(None) is None
    assert maybe_float("junk") is None


def test_parse_ffprobe_video_with_audio():
    data = {
        "format": {
            "duration": "12.34",
            "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
            "format_long_name": "QuickTime / MOV",
            "bit_rate": "123456",
            "size": "190000",
        },
        "streams": [
            {
                "index": 0,
                "codec_type": "video",
                "codec_name": "h264",
                "width": 1920,
                "height": 1080,
                "avg_frame_rate": "0/0",
                "r_frame_rate": "30000/1001",
                "pix_fmt": "yuv420p",
                "tags": {"language": "eng"},
            },
            {
                "index": 1,
                "codec_type": "audio",
                "codec_name": "aac",
                "channels": 2,
                "sample_rate": "48000",
                "channel_layout": "stereo",
                "bit_rate": "128000",
            },
        ],
    }

    md = parse_ffprobe(data)
    assert md.duration == 12.34
    assert md.container.startswith("mov")
    assert md.bitrate == 123456
    assert md.size_bytes == 190000
    assert md.format_long_name == "QuickTime / MOV"
    assert md.has_video and md.has_audio

    video, audio = md.streams
    assert video.kind == StreamKind.video
    assert (video.width, video.height) == (1920, 1080)
    assert 29.9 < video.fps < 30.1  # avg 0/0 falls back to r_frame_rate
    assert video.language == "eng"
    assert video.channels is None

    assert audio.kind == StreamKind.audio
    assert audio.sample_rate == 48000
    assert audio.channels == 2
    assert audio.width is None
    assert md.primary_audio == audio


def test_parse_ffprobe_fallbacks_from_streams():
    data = {
        "format": {"format_name": "wav", "duration": "N/A"},
        "streams": [
            {"codec_type": "audio", "codec_name": "pcm_s16le", "duration": "3.5", "bit_rate": "256000"},
            {"codec_type": "attachment", "codec_name": "ttf"},
        ],
    }
    md = parse_ffprobe(data)
    assert md.duration == 3.5
    assert md.bitrate == 256000
    assert md.streams[0].index == 0
    assert md.streams[1].kind == StreamKind.data
    assert not md.has_video


def test_parse_ffprobe_empty_payload():
    md = parse_ffprobe({})
    assert md.is_empty
    assert md.duration is None
    assert md.streams == ()
