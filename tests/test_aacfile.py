import io
from datetime import timedelta

import pytest

from joyav import aacfile
from joyav.aacparser import (
    AACParseError,
    MPEG4AudioConfig,
    new_codec_data_from_mpeg4_audio_config,
)
from joyav.av import AAC, H264, Packet
from joyav.avutil import Handlers, RegisterHandler
from joyav.codecs import new_speex_codec_data
from joyav.av import ChannelLayout


def _codec(object_type=2):
    return new_codec_data_from_mpeg4_audio_config(
        MPEG4AudioConfig(object_type=object_type, sample_rate_index=11, channel_config=1)
    )


PAYLOADS = [bytes(range(10)), b"\xaa" * 20, b"\x55" * 15]


def _write(payloads):
    out = io.BytesIO()
    muxer = aacfile.Muxer(out)
    muxer.write_header([_codec()])
    for data in payloads:
        muxer.write_packet(Packet(data=data))
    muxer.write_trailer()
    return out.getvalue()


def test_written_size():
    raw = _write(PAYLOADS)
    assert len(raw) == sum(7 + len(p) for p in PAYLOADS)
    assert raw[0] == 0xFF


def test_round_trip_packets_and_times():
    demuxer = aacfile.Demuxer(io.BytesIO(_write(PAYLOADS)))
    (stream,) = demuxer.streams()
    assert stream.type == AAC
    assert stream.sample_rate == 8000
    assert stream.channel_layout == ChannelLayout.MONO
    step = stream.packet_duration(b"")
    packets = [demuxer.read_packet() for _ in PAYLOADS]
    assert [p.data for p in packets] == PAYLOADS
    assert [p.time for p in packets] == [step * i for i in range(len(PAYLOADS))]
    assert packets[0].time == timedelta(0)


def test_eof_after_last_packet():
    demuxer = aacfile.Demuxer(io.BytesIO(_write(PAYLOADS[:1])))
    assert demuxer.read_packet().data == PAYLOADS[0]
    with pytest.raises(EOFError):
        demuxer.read_packet()


def test_empty_stream():
    with pytest.raises(EOFError):
        aacfile.Demuxer(io.BytesIO(b"")).streams()


def test_truncated_frame():
    raw = _write(PAYLOADS[1:2])[:-5]
    with pytest.raises(EOFError):
        aacfile.Demuxer(io.BytesIO(raw)).read_packet()


def test_garbage_input():
    with pytest.raises(AACParseError):
        aacfile.Demuxer(io.BytesIO(b"not an aac file at all")).read_packet()


def test_header_rejects_two_streams():
    with pytest.raises(ValueError, match="only one aac stream"):
        aacfile.Muxer(io.BytesIO()).write_header([_codec(), _codec()])


def test_header_rejects_other_codec():
    speex = new_speex_codec_data(16000, ChannelLayout.MONO)
    with pytest.raises(ValueError, match="only one aac stream"):
        aacfile.Muxer(io.BytesIO()).write_header([speex])
    assert speex.type != H264


def test_header_rejects_sbr_object_type():
    with pytest.raises(ValueError, match="not allowed in ADTS"):
        aacfile.Muxer(io.BytesIO()).write_header([_codec(object_type=5)])


def test_handler_registration():
    h = RegisterHandler()
    aacfile.handler(h)
    assert h.ext == ".aac"
    assert h.codec_types == [AAC]
    assert h.probe(_write(PAYLOADS))
    assert not h.probe(b"FLV\x01\x05\x00\x00\x00\x09")


def test_open_and_create_through_handlers(tmp_path):
    handlers = Handlers()
    handlers.add(aacfile.handler)
    path = str(tmp_path / "sound.aac")
    muxer = handlers.create(path)
    muxer.write_header([_codec()])
    for data in PAYLOADS:
        muxer.write_packet(Packet(data=data))
    muxer.close()

    demuxer = handlers.open(path)
    try:
        (stream,) = demuxer.streams()
        assert stream.sample_rate == 8000
        assert [demuxer.read_packet().data for _ in PAYLOADS] == PAYLOADS
    finally:
        demuxer.close()