"""Splitting H.264 byte streams into NAL units (AVCC or Annex B)."""

from __future__ import annotations

from enum import IntEnum

NALU_SEI = 6
NALU_PPS = 7
NALU_SPS = 8
NALU_AUD = 9

START_CODE_BYTES = b"\x00\x00\x01"
AUD_BYTES = b"\x00\x00\x00\x01\x09\xf0\x00\x00\x00\x01"


class NaluFormat(IntEnum):
    """How NAL units are delimited in a buffer."""

    RAW = 0
    AVCC = 1
    ANNEXB = 2


def is_data_nalu(b: bytes) -> bool:
    """Whether the NAL unit carries coded slice data (types 1 to 5)."""
    typ = b[0] & 0x1F
    return 1 <= typ <= 5


def check_nalus_type(b: bytes) -> NaluFormat:
    """The delimiting format detected in b."""
    _, typ = split_nalus(b)
    return typ


def _u24(b: bytes, pos: int) -> int:
    return int.from_bytes(b[pos:pos + 3], "big")


def _u32(b: bytes, pos: int) -> int:
    return int.from_bytes(b[pos:pos + 4], "big")


def _split_avcc(b: bytes) -> list[bytes] | None:
    size = _u32(b, 0)
    pos = 4
    if size > len(b) - pos:
        return None
    nalus = []
    while True:
        nalus.append(b[pos:pos + size])
        pos += size
        if len(b) - pos < 4:
            break
        size = _u32(b, pos)
        pos += 4
        if size > len(b) - pos:
            break
    return nalus if pos == len(b) else None


def _find_start_code(b: bytes, pos: int) -> tuple[int, int]:
    """Position and length of the next start code at or after pos, or (len(b), 0)."""
    n = len(b)
    while pos < n:
        if pos + 2 < n and b[pos] == 0:
            val3 = _u24(b, pos)
            if val3 == 1:
                return pos, 3
            if val3 == 0 and pos + 3 < n and b[pos + 3] == 1:
                return pos, 4
        pos += 1
    return n, 0


def _split_annexb(b: bytes, first_code_len: int) -> list[bytes]:
    nalus = []
    pos = first_code_len
    while pos < len(b):
        end, code_len = _find_start_code(b, pos)
        if end != pos:
            nalus.append(b[pos:end])
        pos = end + code_len
    return nalus


def split_nalus(b: bytes) -> tuple[list[bytes], NaluFormat]:
    """Split a buffer into NAL units and report the format it was in."""
    b = bytes(b)
    if len(b) < 4:
        return [b], NaluFormat.RAW

    val3 = _u24(b, 0)
    val4 = _u32(b, 0)

    if val4 <= len(b):
        nalus = _split_avcc(b)
        if nalus is not None:
            return nalus, NaluFormat.AVCC

    if val3 == 1:
        return _split_annexb(b, 3), NaluFormat.ANNEXB
    if val4 == 1:
        return _split_annexb(b, 4), NaluFormat.ANNEXB

    return [b], NaluFormat.RAW