from datetime import timedelta

import pytest

from joyav import av
from joyav.av import AudioFrame, ChannelLayout, CodecType, SampleFormat


def test_sample_format_sizes():
    assert SampleFormat.S16.bytes_per_sample() == 2
    assert SampleFormat.S16P.bytes_per_sample() == SampleFormat.S16.bytes_per_sample()
    assert SampleFormat.FLT.bytes_per_sample() == SampleFormat.S32.bytes_per_sample()
    assert SampleFormat.U32.bytes_per_sample() == SampleFormat.FLTP.bytes_per_sample()
    assert SampleFormat.DBL.bytes_per_sample() == 2 * SampleFormat.FLT.bytes_per_sample()
    assert SampleFormat.U8.bytes_per_sample() == SampleFormat.U8P.bytes_per_sample()


def test_sample_format_planar_and_names():
    assert SampleFormat.FLTP.is_planar()
    assert SampleFormat.S16P.is_planar()
    assert not SampleFormat.S16.is_planar()
    assert str(SampleFormat.FLTP) == "FLTP"
    assert str(SampleFormat.U8) == "U8"


def test_channel_layout_count():
    stereo = ChannelLayout.STEREO
    assert stereo.count() == ChannelLayout.FRONT_LEFT.count() + ChannelLayout.FRONT_RIGHT.count()
    assert ChannelLayout.SURROUND.count() == stereo.count() + ChannelLayout.MONO.count()
    assert ChannelLayout.THREE_POINT_ONE.count() == ChannelLayout.SURROUND.count() + 1
    assert str(stereo) == "2ch"
    assert av.CH_STEREO == av.CH_FRONT_LEFT | av.CH_FRONT_RIGHT


def test_codec_types():
    assert str(av.H264) == "H264"
    assert str(av.AAC) == "AAC"
    assert str(av.NELLYMOSER) == "NELLYMOSER"
    assert av.H264.is_video() and not av.H264.is_audio()
    for typ in (av.AAC, av.PCM_MULAW, av.PCM_ALAW, av.SPEEX, av.NELLYMOSER):
        assert typ.is_audio() and not typ.is_video()
    assert av.AAC != av.H264


def test_make_codec_type():
    audio = av.make_audio_codec_type(5)
    video = av.make_video_codec_type(5)
    assert isinstance(audio, CodecType)
    assert audio.is_audio()
    assert video.is_video()
    assert audio >> 1 == 5
    assert video >> 1 == 5
    assert str(audio) == ""


def _frame(samples, fmt=SampleFormat.S16):
    size = fmt.bytes_per_sample()
    return AudioFrame(
        sample_format=fmt,
        channel_layout=ChannelLayout.MONO,
        sample_count=samples,
        sample_rate=8000,
        data=[bytes(i % 256 for i in range(samples * size))],
    )


def test_audio_frame_duration():
    frame = AudioFrame(SampleFormat.S16, ChannelLayout.MONO, 44100 * 3, 44100, [b""])
    assert frame.duration() == timedelta(seconds=3)


def test_audio_frame_slice_and_concat_round_trip():
    frame = _frame(10)
    head = frame.slice(0, 4)
    tail = frame.slice(4, 10)
    assert head.sample_count == 4
    assert tail.sample_count == 6
    assert len(head.data[0]) == 4 * SampleFormat.S16.bytes_per_sample()
    assert head.concat(tail) == frame
    assert frame.data[0] == _frame(10).data[0]


def test_audio_frame_slice_invalid():
    with pytest.raises(ValueError):
        _frame(10).slice(5, 2)


def test_audio_frame_same_format():
    a = _frame(4)
    b = _frame(8)
    assert a.has_same_format(b)
    c = AudioFrame(SampleFormat.FLTP, ChannelLayout.MONO, 4, 8000, [b""])
    assert not a.has_same_format(c)
    d = AudioFrame(SampleFormat.S16, ChannelLayout.STEREO, 4, 8000, [b""])
    assert not a.has_same_format(d)
    e = AudioFrame(SampleFormat.S16, ChannelLayout.MONO, 4, 16000, [b""])
    assert not a.has_same_format(e)


def test_packet_defaults():
    pkt = av.Packet()
    assert pkt.time == timedelta(0)
    assert pkt.data == b""
    assert not pkt.is_key_frame