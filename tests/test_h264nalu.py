import pytest

from joyav.h264nalu import (
    NaluFormat,
    check_nalus_type,
    is_data_nalu,
    split_nalus,
)


def test_annexb_frame_from_source_case():
    frame = bytes.fromhex("00000001223322330000000122332233223300000133000001000001")
    nalus, typ = split_nalus(frame)
    assert typ == NaluFormat.ANNEXB
    assert nalus == [
        bytes.fromhex("22332233"),
        bytes.fromhex("223322332233"),
        bytes.fromhex("33"),
    ]


def test_avcc_frame_from_source_case():
    frame = bytes.fromhex("00000008aabbccaabbccaabb00000001aa")
    nalus, typ = split_nalus(frame)
    assert typ == NaluFormat.AVCC
    assert nalus == [bytes.fromhex("aabbccaabbccaabb"), bytes.fromhex("aa")]


def test_short_buffer_is_raw():
    nalus, typ = split_nalus(b"\x01\x02")
    assert typ == NaluFormat.RAW
    assert nalus == [b"\x01\x02"]


def test_unrecognised_buffer_is_raw():
    data = b"\xff\xee\xdd\xcc\xbb"
    nalus, typ = split_nalus(data)
    assert typ == NaluFormat.RAW
    assert nalus == [data]


def test_three_byte_start_code():
    nalus, typ = split_nalus(b"\x00\x00\x01\x65\xaa\x00\x00\x01\x41\xbb")
    assert typ == NaluFormat.ANNEXB
    assert nalus == [b"\x65\xaa", b"\x41\xbb"]


def test_avcc_length_larger_than_buffer_is_not_avcc():
    data = b"\x00\x00\x00\x10\x65"
    _, typ = split_nalus(data)
    assert typ == NaluFormat.RAW


def test_check_nalus_type_matches_split():
    frame = bytes.fromhex("00000008aabbccaabbccaabb00000001aa")
    assert check_nalus_type(frame) == NaluFormat.AVCC
    assert check_nalus_type(b"\x00\x00\x01\x65") == NaluFormat.ANNEXB


@pytest.mark.parametrize(
    "first, expected",
    [(0x65, True), (0x41, True), (0x67, False), (0x68, False), (0x06, False)],
)
def test_is_data_nalu(first, expected):
    assert is_data_nalu(bytes([first, 0])) is expected