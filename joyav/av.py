"""Core audio/video types: sample formats, channel layouts, codec types, packets and frames."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum, IntFlag
from typing import Any, Protocol, Sequence, runtime_checkable


class SampleFormat(IntEnum):
    """Audio sample format."""

    U8 = 1  # 8-bit unsigned integer
    S16 = 2  # signed 16-bit integer
    S32 = 3  # signed 32-bit integer
    FLT = 4  # 32-bit float
    DBL = 5  # 64-bit float
    U8P = 6  # 8-bit unsigned integer, planar
    S16P = 7  # signed 16-bit integer, planar
    S32P = 8  # signed 32-bit integer, planar
    FLTP = 9  # 32-bit float, planar
    DBLP = 10  # 64-bit float, planar
    U32 = 11  # unsigned 32-bit integer

    def bytes_per_sample(self) -> int:
        """Size in bytes of one sample of one channel."""
        return _BYTES_PER_SAMPLE.get(self, 0)

    def is_planar(self) -> bool:
        """Whether each channel is stored in its own plane."""
        return self in _PLANAR_FORMATS

    def __str__(self) -> str:
        return self.name


_BYTES_PER_SAMPLE = {
    SampleFormat.U8: 1,
    SampleFormat.U8P: 1,
    SampleFormat.S16: 2,
    SampleFormat.S16P: 2,
    SampleFormat.FLT: 4,
    SampleFormat.FLTP: 4,
    SampleFormat.S32: 4,
    SampleFormat.S32P: 4,
    SampleFormat.U32: 4,
    SampleFormat.DBL: 8,
    SampleFormat.DBLP: 8,
}

_PLANAR_FORMATS = frozenset(
    {SampleFormat.S16P, SampleFormat.S32P, SampleFormat.FLTP, SampleFormat.DBLP}
)


class ChannelLayout(IntFlag):
    """Audio channel layout as a bit set of speaker positions."""

    FRONT_CENTER = 1 << 0
    FRONT_LEFT = 1 << 1
    FRONT_RIGHT = 1 << 2
    BACK_CENTER = 1 << 3
    BACK_LEFT = 1 << 4
    BACK_RIGHT = 1 << 5
    SIDE_LEFT = 1 << 6
    SIDE_RIGHT = 1 << 7
    LOW_FREQ = 1 << 8
    NR = 1 << 9

    MONO = 1 << 0
    STEREO = (1 << 1) | (1 << 2)
    TWO_ONE = (1 << 1) | (1 << 2) | (1 << 3)
    TWO_POINT_ONE = (1 << 1) | (1 << 2) | (1 << 8)
    SURROUND = (1 << 1) | (1 << 2) | (1 << 0)
    THREE_POINT_ONE = (1 << 1) | (1 << 2) | (1 << 0) | (1 << 8)

    def count(self) -> int:
        """Number of channels in the layout."""
        return bin(int(self)).count("1")

    def __str__(self) -> str:
        return f"{self.count()}ch"


CH_FRONT_CENTER = ChannelLayout.FRONT_CENTER
CH_FRONT_LEFT = ChannelLayout.FRONT_LEFT
CH_FRONT_RIGHT = ChannelLayout.FRONT_RIGHT
CH_BACK_CENTER = ChannelLayout.BACK_CENTER
CH_BACK_LEFT = ChannelLayout.BACK_LEFT
CH_BACK_RIGHT = ChannelLayout.BACK_RIGHT
CH_SIDE_LEFT = ChannelLayout.SIDE_LEFT
CH_SIDE_RIGHT = ChannelLayout.SIDE_RIGHT
CH_LOW_FREQ = ChannelLayout.LOW_FREQ
CH_NR = ChannelLayout.NR
CH_MONO = ChannelLayout.MONO
CH_STEREO = ChannelLayout.STEREO
CH_2_1 = ChannelLayout.TWO_ONE
CH_2POINT1 = ChannelLayout.TWO_POINT_ONE
CH_SURROUND = ChannelLayout.SURROUND
CH_3POINT1 = ChannelLayout.THREE_POINT_ONE


_CODEC_TYPE_AUDIO_BIT = 0x1
_CODEC_TYPE_OTHER_BITS = 1
_CODEC_TYPE_MAGIC = 233333


class CodecType(int):
    """Video or audio codec identifier; the lowest bit marks audio."""

    __slots__ = ()

    def is_audio(self) -> bool:
        return bool(self & _CODEC_TYPE_AUDIO_BIT)

    def is_video(self) -> bool:
        return not self & _CODEC_TYPE_AUDIO_BIT

    def __str__(self) -> str:
        return _CODEC_NAMES.get(int(self), "")

    def __repr__(self) -> str:
        return f"CodecType({str(self) or int(self)})"


def make_audio_codec_type(base: int) -> CodecType:
    """Make a new audio codec type from a base number."""
    return CodecType(((base << _CODEC_TYPE_OTHER_BITS) | _CODEC_TYPE_AUDIO_BIT) & 0xFFFFFFFF)


def make_video_codec_type(base: int) -> CodecType:
    """Make a new video codec type from a base number."""
    return CodecType((base << _CODEC_TYPE_OTHER_BITS) & 0xFFFFFFFF)


H264 = make_video_codec_type(_CODEC_TYPE_MAGIC + 1)
AAC = make_audio_codec_type(_CODEC_TYPE_MAGIC + 1)
PCM_MULAW = make_audio_codec_type(_CODEC_TYPE_MAGIC + 2)
PCM_ALAW = make_audio_codec_type(_CODEC_TYPE_MAGIC + 3)
SPEEX = make_audio_codec_type(_CODEC_TYPE_MAGIC + 4)
NELLYMOSER = make_audio_codec_type(_CODEC_TYPE_MAGIC + 5)

_CODEC_NAMES = {
    int(H264): "H264",
    int(AAC): "AAC",
    int(PCM_MULAW): "PCM_MULAW",
    int(PCM_ALAW): "PCM_ALAW",
    int(SPEEX): "SPEEX",
    int(NELLYMOSER): "NELLYMOSER",
}


@runtime_checkable
class CodecData(Protocol):
    """Bytes and parameters needed to initialise a decoder."""

    @property
    def type(self) -> CodecType: ...


@runtime_checkable
class VideoCodecData(CodecData, Protocol):
    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...


@runtime_checkable
class AudioCodecData(CodecData, Protocol):
    @property
    def sample_format(self) -> SampleFormat: ...

    @property
    def sample_rate(self) -> int: ...

    @property
    def channel_layout(self) -> ChannelLayout: ...

    def packet_duration(self, data: bytes) -> timedelta:
        """Duration of one compressed packet."""
        ...


@dataclass
class Packet:
    """A compressed audio or video packet."""

    is_key_frame: bool = False
    idx: int = 0
    composition_time: timedelta = timedelta(0)
    time: timedelta = timedelta(0)
    data: bytes = b""


@runtime_checkable
class Demuxer(Protocol):
    """Reads compressed packets from a container; read_packet raises EOFError at the end."""

    def streams(self) -> list[Any]: ...

    def read_packet(self) -> Packet: ...


@runtime_checkable
class Muxer(Protocol):
    """Writes compressed packets into a container."""

    def write_header(self, streams: Sequence[Any]) -> None: ...

    def write_packet(self, pkt: Packet) -> None: ...

    def write_trailer(self) -> None: ...


@dataclass
class AudioFrame:
    """Raw audio samples; planar formats keep one bytes object per channel."""

    sample_format: SampleFormat
    channel_layout: ChannelLayout
    sample_count: int
    sample_rate: int
    data: list[bytes] = field(default_factory=list)

    def duration(self) -> timedelta:
        return timedelta(seconds=self.sample_count) // self.sample_rate

    def has_same_format(self, other: AudioFrame) -> bool:
        return (
            self.sample_rate == other.sample_rate
            and self.channel_layout == other.channel_layout
            and self.sample_format == other.sample_format
        )

    def slice(self, start: int, end: int) -> AudioFrame:
        """Samples from start up to end as a new frame."""
        if start > end:
            raise ValueError(f"av: AudioFrame split failed start={start} end={end} invalid")
        size = self.sample_format.bytes_per_sample()
        return dataclasses.replace(
            self,
            sample_count=end - start,
            data=[plane[start * size:end * size] for plane in self.data],
        )

    def concat(self, other: AudioFrame) -> AudioFrame:
        """This frame followed by the samples of other."""
        return dataclasses.replace(
            self,
            sample_count=self.sample_count + other.sample_count,
            data=[a + b for a, b in zip(self.data, other.data)],
        )


@runtime_checkable
class AudioEncoder(Protocol):
    """Encodes raw audio frames into compressed packets."""

    sample_rate: int
    channel_layout: ChannelLayout
    sample_format: SampleFormat
    bitrate: int

    def codec_data(self) -> AudioCodecData: ...

    def encode(self, frame: AudioFrame) -> list[bytes]: ...

    def close(self) -> None: ...

    def set_option(self, key: str, value: Any) -> None: ...

    def get_option(self, key: str) -> Any: ...


@runtime_checkable
class AudioDecoder(Protocol):
    """Decodes compressed packets; decode returns None when no frame is ready."""

    def decode(self, data: bytes) -> AudioFrame | None: ...

    def close(self) -> None: ...


@runtime_checkable
class AudioResampler(Protocol):
    """Converts raw audio between rates, formats and layouts."""

    def resample(self, frame: AudioFrame) -> AudioFrame: ...