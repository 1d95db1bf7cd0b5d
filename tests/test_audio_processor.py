from unittest.mock import Mock

import pytest
from pydub.exceptions import CouldntEncodeError

import memopipe.audio_processor as ap
from memopipe.errors import ToolInvocationError


class FakeSegment:
    def __init__(self, write=True, error=None):
        self.write = write
        self.error = error
        self.channels = None
        self.frame_rate = None
        self.export_kwargs = None

    def set_channels(self, channels):
        self.channels = channels
        return self

    def set_frame_rate(self, rate):
        self.frame_rate = rate
        return self

    def export(self, out_f, **kwargs):
        self.export_kwargs = dict(kwargs, out_f=out_f)
        if self.error:
            raise self.error
        if self.write:
            with open(out_f, "wb") as f:
                f.write(b"data")
        return Mock()


@pytest.fixture
def segment(monkeypatch):
    seg = FakeSegment()
    monkeypatch.setattr(ap.AudioSegment, "from_file", lambda path: seg)
    return seg


def test_convert_to_wav(tmp_path, segment):
    out = tmp_path / "converted" / "memo.wav"
    result = ap.PydubTranscoder().convert(tmp_path / "memo.m4a", out, "wav")
    assert result == out
    assert out.exists()
    assert segment.channels == 1
    assert segment.frame_rate == 22050
    assert segment.export_kwargs["format"] == "wav"
    assert segment.export_kwargs["codec"] == "pcm_s16le"
    assert segment.export_kwargs["parameters"] == [
        "-af", "highpass=f=80,lowpass=f=8000,volume=1.5,dynaudnorm",
    ]


def test_convert_to_flac_uses_max_compression(tmp_path, segment):
    out = tmp_path / "memo.flac"
    ap.PydubTranscoder().convert(tmp_path / "memo.m4a", out, "flac")
    assert segment.export_kwargs["codec"] == "flac"
    params = segment.export_kwargs["parameters"]
    assert params[:2] == ["-af", ap.FILTER_CHAIN]
    assert params[2:] == ["-compression_level", "12"]


def test_unknown_format_falls_back_to_wav(tmp_path, segment):
    out = tmp_path / "memo.ogg"
    ap.PydubTranscoder().convert(tmp_path / "memo.m4a", out, "ogg")
    assert segment.export_kwargs["format"] == "wav"
    assert segment.export_kwargs["codec"] == "pcm_s16le"
    assert ap.resolve_format(" FLAC ") == "flac"


def test_encode_failure_raises(tmp_path, monkeypatch):
    seg = FakeSegment(error=CouldntEncodeError("ffmpeg returned 1"))
    monkeypatch.setattr(ap.AudioSegment, "from_file", lambda path: seg)
    with pytest.raises(ToolInvocationError):
        ap.PydubTranscoder().convert(tmp_path / "memo.m4a", tmp_path / "memo.wav", "wav")


def test_missing_output_raises(tmp_path, monkeypatch):
    seg = FakeSegment(write=False)
    monkeypatch.setattr(ap.AudioSegment, "from_file", lambda path: seg)
    with pytest.raises(ToolInvocationError):
        ap.PydubTranscoder().convert(tmp_path / "memo.m4a", tmp_path / "memo.wav", "wav")


def test_missing_binary_raises(tmp_path, monkeypatch):
    def no_ffmpeg(path):
        raise FileNotFoundError("ffmpeg")

    monkeypatch.setattr(ap.AudioSegment, "from_file", no_ffmpeg)
    with pytest.raises(ToolInvocationError):
        ap.PydubTranscoder().convert(tmp_path / "memo.m4a", tmp_path / "memo.wav", "wav")


def test_disk_full_while_decoding_raises(tmp_path, monkeypatch):
    def disk_full(path):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(ap.AudioSegment, "from_file", disk_full)
    with pytest.raises(ToolInvocationError):
        ap.PydubTranscoder().convert(tmp_path / "memo.m4a", tmp_path / "memo.wav", "wav")


def test_unwritable_output_raises(tmp_path, monkeypatch):
    seg = FakeSegment(error=PermissionError(13, "Permission denied"))
    monkeypatch.setattr(ap.AudioSegment, "from_file", lambda path: seg)
    with pytest.raises(ToolInvocationError):
        ap.PydubTranscoder().convert(tmp_path / "memo.m4a", tmp_path / "memo.wav", "wav")
