"""FLV file headers and tags."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import BinaryIO

from .av import ChannelLayout

MAX_TAG_SUB_HEADER_LENGTH = 16

TAG_AUDIO = 8
TAG_VIDEO = 9
TAG_SCRIPTDATA = 18

SOUND_MP3 = 2
SOUND_NELLYMOSER_16KHZ_MONO = 4
SOUND_NELLYMOSER_8KHZ_MONO = 5
SOUND_NELLYMOSER = 6
SOUND_ALAW = 7
SOUND_MULAW = 8
SOUND_AAC = 10
SOUND_SPEEX = 11

SOUND_5_5KHZ = 0
SOUND_11KHZ = 1
SOUND_22KHZ = 2
SOUND_44KHZ = 3

SOUND_8BIT = 0
SOUND_16BIT = 1

SOUND_MONO = 0
SOUND_STEREO = 1

AAC_SEQHDR = 0
AAC_RAW = 1

AVC_SEQHDR = 0
AVC_NALU = 1
AVC_EOS = 2

FRAME_KEY = 1
FRAME_INTER = 2

VIDEO_H264 = 7

FILE_HAS_AUDIO = 0x4
FILE_HAS_VIDEO = 0x1

TAG_HEADER_LENGTH = 11
TAG_TRAILER_LENGTH = 4
FILE_HEADER_LENGTH = 9

_FLV_SIGNATURE = 0x464C56
_MS = timedelta(milliseconds=1)


class FLVError(ValueError):
    """Malformed FLV data."""


def _to_int32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _i24(b: bytes) -> int:
    value = int.from_bytes(b[:3], "big")
    return value - 0x1000000 if value & 0x800000 else value


def _put_i24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


def ts_to_time(ts: int) -> timedelta:
    """Millisecond timestamp to a duration."""
    return timedelta(milliseconds=ts)


def time_to_ts(tm: timedelta) -> int:
    """Duration to a 32-bit signed millisecond timestamp, truncating toward zero."""
    us = tm // timedelta(microseconds=1)
    ms = abs(us) // 1000
    return _to_int32(-ms if us < 0 else ms)


@dataclass
class Tag:
    """One FLV tag with its audio or video sub-header fields."""

    tag_type: int = 0
    sound_format: int = 0
    sound_rate: int = 0
    sound_size: int = 0
    sound_type: int = 0
    aac_packet_type: int = 0
    frame_type: int = 0
    codec_id: int = 0
    avc_packet_type: int = 0
    composition_time: int = 0
    data: bytes = b""

    def channel_layout(self) -> ChannelLayout:
        return ChannelLayout.MONO if self.sound_type == SOUND_MONO else ChannelLayout.STEREO

    def _audio_parse_header(self, b: bytes) -> int:
        if len(b) < 1:
            raise FLVError("audiodata: parse invalid")
        flags = b[0]
        self.sound_format = flags >> 4
        self.sound_rate = (flags >> 2) & 0x3
        self.sound_size = (flags >> 1) & 0x1
        self.sound_type = flags & 0x1
        if self.sound_format == SOUND_AAC:
            if len(b) < 2:
                raise FLVError("audiodata: parse invalid")
            self.aac_packet_type = b[1]
            return 2
        return 1

    def _audio_fill_header(self) -> bytes:
        flags = (
            (self.sound_format << 4)
            | (self.sound_rate << 2)
            | (self.sound_size << 1)
            | self.sound_type
        ) & 0xFF
        if self.sound_format == SOUND_AAC:
            return bytes((flags, self.aac_packet_type & 0xFF))
        return bytes((flags,))

    def _video_parse_header(self, b: bytes) -> int:
        if len(b) < 1:
            raise FLVError("videodata: parse invalid")
        flags = b[0]
        self.frame_type = flags >> 4
        self.codec_id = flags & 0xF
        if self.frame_type in (FRAME_INTER, FRAME_KEY):
            if len(b) < 5:
                raise FLVError("videodata: parse invalid")
            self.avc_packet_type = b[1]
            self.composition_time = _i24(b[2:5])
            return 5
        return 1

    def _video_fill_header(self) -> bytes:
        flags = ((self.frame_type << 4) | self.codec_id) & 0xFF
        return bytes((flags, self.avc_packet_type & 0xFF)) + _put_i24(self.composition_time)

    def fill_header(self) -> bytes:
        """The audio or video sub-header that precedes the tag data."""
        if self.tag_type == TAG_AUDIO:
            return self._audio_fill_header()
        if self.tag_type == TAG_VIDEO:
            return self._video_fill_header()
        return b""

    def parse_header(self, b: bytes) -> int:
        """Read the sub-header from b; return how many bytes it took."""
        if self.tag_type == TAG_AUDIO:
            return self._audio_parse_header(b)
        if self.tag_type == TAG_VIDEO:
            return self._video_parse_header(b)
        return 0


def parse_tag_header(b: bytes) -> tuple[Tag, int, int]:
    """Parse an 11-byte tag header; return (tag, timestamp, data length)."""
    if len(b) < TAG_HEADER_LENGTH:
        raise FLVError("flvio: tag header too short")
    tagtype = b[0]
    if tagtype not in (TAG_AUDIO, TAG_VIDEO, TAG_SCRIPTDATA):
        raise FLVError(f"flvio: ReadTag tagtype={tagtype} invalid")
    datalen = int.from_bytes(b[1:4], "big")
    tslo = int.from_bytes(b[4:7], "big")
    ts = _to_int32(tslo | (b[7] << 24))
    return Tag(tag_type=tagtype), ts, datalen


def _read_exact(r: BinaryIO, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = r.read(n - len(buf))
        if not chunk:
            raise EOFError("flvio: unexpected end of stream")
        buf += chunk
    return bytes(buf)


def read_tag(r: BinaryIO) -> tuple[Tag, int]:
    """Read one tag with its trailer; return (tag, timestamp)."""
    tag, ts, datalen = parse_tag_header(_read_exact(r, TAG_HEADER_LENGTH))
    data = _read_exact(r, datalen)
    n = tag.parse_header(data)
    tag.data = data[n:]
    _read_exact(r, TAG_TRAILER_LENGTH)
    return tag, ts


def fill_tag_header(tagtype: int, datalen: int, ts: int) -> bytes:
    """The 11-byte tag header."""
    return (
        bytes((tagtype & 0xFF,))
        + (datalen & 0xFFFFFF).to_bytes(3, "big")
        + (ts & 0xFFFFFF).to_bytes(3, "big")
        + bytes(((ts >> 24) & 0xFF,))
        + _put_i24(0)
    )


def fill_tag_trailer(datalen: int) -> bytes:
    """The 4-byte previous-tag-size trailer."""
    return ((datalen + TAG_HEADER_LENGTH) & 0xFFFFFFFF).to_bytes(4, "big")


def write_tag(w: BinaryIO, tag: Tag, ts: int) -> None:
    """Write header, sub-header, data and trailer of one tag."""
    sub_header = tag.fill_header()
    datalen = len(tag.data) + len(sub_header)
    w.write(fill_tag_header(tag.tag_type, datalen, ts) + sub_header)
    w.write(tag.data)
    w.write(fill_tag_trailer(datalen))


def fill_file_header(flags: int) -> bytes:
    """The file header followed by the zero PreviousTagSize0."""
    return (
        b"FLV\x01"
        + bytes((flags & 0xFF,))
        + (9).to_bytes(4, "big")
        + (0).to_bytes(4, "big")
    )


def parse_file_header(b: bytes) -> tuple[int, int]:
    """Parse the 9-byte file header; return (flags, bytes to skip before the first tag)."""
    if len(b) < FILE_HEADER_LENGTH:
        raise FLVError("flvio: file header too short")
    if int.from_bytes(b[0:3], "big") != _FLV_SIGNATURE:
        raise FLVError("flvio: file header cc3 invalid")
    flags = b[4]
    skip = int.from_bytes(b[5:9], "big") - 9 + 4
    if skip < 0:
        raise FLVError("flvio: file header datasize invalid")
    return flags, skip