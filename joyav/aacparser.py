"""MPEG-4 audio configuration, ADTS headers and AAC codec data."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .av import AAC, ChannelLayout, CodecType, SampleFormat

AOT_AAC_MAIN = 1
AOT_AAC_LC = 2
AOT_AAC_SSR = 3
AOT_AAC_LTP = 4
AOT_SBR = 5
AOT_AAC_SCALABLE = 6
AOT_TWINVQ = 7
AOT_CELP = 8
AOT_HVXC = 9
AOT_TTSI = 12
AOT_MAINSYNTH = 13
AOT_WAVESYNTH = 14
AOT_MIDI = 15
AOT_SAFX = 16
AOT_ER_AAC_LC = 17
AOT_ER_AAC_LTP = 19
AOT_ER_AAC_SCALABLE = 20
AOT_ER_TWINVQ = 21
AOT_ER_BSAC = 22
AOT_ER_AAC_LD = 23
AOT_ER_CELP = 24
AOT_ER_HVXC = 25
AOT_ER_HILN = 26
AOT_ER_PARAM = 27
AOT_SSC = 28
AOT_PS = 29
AOT_SURROUND = 30
AOT_ESCAPE = 31
AOT_L1 = 32
AOT_L2 = 33
AOT_L3 = 34
AOT_DST = 35
AOT_ALS = 36
AOT_SLS = 37
AOT_SLS_NON_CORE = 38
AOT_ER_AAC_ELD = 39
AOT_SMR_SIMPLE = 40
AOT_SMR_MAIN = 41
AOT_USAC_NOSBR = 42
AOT_SAOC = 43
AOT_LD_SURROUND = 44
AOT_USAC = 45

ADTS_HEADER_LENGTH = 7

SAMPLE_RATE_TABLE = (
    96000, 88200, 64000, 48000, 44100, 32000,
    24000, 22050, 16000, 12000, 11025, 8000, 7350,
)

_FC = ChannelLayout.FRONT_CENTER
_FL = ChannelLayout.FRONT_LEFT
_FR = ChannelLayout.FRONT_RIGHT

CHANNEL_CONFIG_TABLE = (
    ChannelLayout(0),
    _FC,
    _FL | _FR,
    _FC | _FL | _FR,
    _FC | _FL | _FR | ChannelLayout.BACK_CENTER,
    _FC | _FL | _FR | ChannelLayout.BACK_LEFT | ChannelLayout.BACK_RIGHT,
    _FC | _FL | _FR | ChannelLayout.BACK_LEFT | ChannelLayout.BACK_RIGHT | ChannelLayout.LOW_FREQ,
    _FC | _FL | _FR | ChannelLayout.SIDE_LEFT | ChannelLayout.SIDE_RIGHT
    | ChannelLayout.BACK_LEFT | ChannelLayout.BACK_RIGHT | ChannelLayout.LOW_FREQ,
)


class AACParseError(ValueError):
    """Malformed AAC configuration or ADTS data."""


@dataclass
class MPEG4AudioConfig:
    """AudioSpecificConfig fields plus the sample rate and layout they imply."""

    sample_rate: int = 0
    channel_layout: ChannelLayout = ChannelLayout(0)
    object_type: int = 0
    sample_rate_index: int = 0
    channel_config: int = 0

    def is_valid(self) -> bool:
        return self.object_type > 0

    def complete(self) -> None:
        """Fill sample_rate and channel_layout from their table indices."""
        if self.sample_rate_index < len(SAMPLE_RATE_TABLE):
            self.sample_rate = SAMPLE_RATE_TABLE[self.sample_rate_index]
        if self.channel_config < len(CHANNEL_CONFIG_TABLE):
            self.channel_layout = CHANNEL_CONFIG_TABLE[self.channel_config]


def parse_adts_header(frame: bytes) -> tuple[MPEG4AudioConfig, int, int, int]:
    """Parse an ADTS header; return (config, header length, frame length, samples)."""
    if len(frame) < ADTS_HEADER_LENGTH:
        raise AACParseError("aacparser: adts header too short")
    if frame[0] != 0xFF or frame[1] & 0xF6 != 0xF0:
        raise AACParseError("aacparser: not adts header")
    config = MPEG4AudioConfig(
        object_type=(frame[2] >> 6) + 1,
        sample_rate_index=(frame[2] >> 2) & 0xF,
        channel_config=((frame[2] << 2) & 0x4) | ((frame[3] >> 6) & 0x3),
    )
    if config.channel_config == 0:
        raise AACParseError("aacparser: adts channel count invalid")
    config.complete()
    framelen = ((frame[3] & 0x3) << 11) | (frame[4] << 3) | (frame[5] >> 5)
    samples = ((frame[6] & 0x3) + 1) * 1024
    hdrlen = 7 if frame[1] & 0x1 else 9
    if framelen < hdrlen:
        raise AACParseError("aacparser: adts framelen < hdrlen")
    return config, hdrlen, framelen, samples


def fill_adts_header(config: MPEG4AudioConfig, samples: int, payload_length: int) -> bytes:
    """Build a 7-byte ADTS header for a payload of the given length."""
    length = payload_length + ADTS_HEADER_LENGTH
    h = bytearray(b"\xff\xf1\x50\x80\x43\xff\xcd")
    h[2] = (
        (((config.object_type - 1) & 0x3) << 6)
        | ((config.sample_rate_index & 0xF) << 2)
        | ((config.channel_config >> 2) & 0x1)
    )
    h[3] = (h[3] & 0x3F) | ((config.channel_config & 0x3) << 6)
    h[3] = (h[3] & 0xFC) | ((length >> 11) & 0x3)
    h[4] = (length >> 3) & 0xFF
    h[5] = (h[5] & 0x1F) | ((length & 0x7) << 5)
    h[6] = (h[6] & 0xFC) | ((samples // 1024 - 1) & 0xFF)
    return bytes(h)


class _BitReader:
    def __init__(self, data: bytes) -> None:
        self._value = int.from_bytes(data, "big")
        self._total = len(data) * 8
        self._pos = 0

    def read(self, n: int) -> int:
        if self._pos + n > self._total:
            raise AACParseError("aacparser: unexpected end of data")
        shift = self._total - self._pos - n
        self._pos += n
        return (self._value >> shift) & ((1 << n) - 1)


class _BitWriter:
    def __init__(self) -> None:
        self._value = 0
        self._nbits = 0

    def write(self, value: int, n: int) -> None:
        self._value = (self._value << n) | (value & ((1 << n) - 1))
        self._nbits += n

    def to_bytes(self) -> bytes:
        pad = -self._nbits % 8
        total = self._nbits + pad
        return (self._value << pad).to_bytes(total // 8, "big")


def parse_mpeg4_audio_config_bytes(data: bytes) -> MPEG4AudioConfig:
    """Parse an AudioSpecificConfig."""
    r = _BitReader(bytes(data))
    object_type = r.read(5)
    if object_type == AOT_ESCAPE:
        object_type = 32 + r.read(6)
    sample_rate_index = r.read(4)
    if sample_rate_index == 0xF:
        sample_rate_index = r.read(24)
    config = MPEG4AudioConfig(
        object_type=object_type,
        sample_rate_index=sample_rate_index,
        channel_config=r.read(4),
    )
    config.complete()
    return config


def mpeg4_audio_config_to_bytes(config: MPEG4AudioConfig) -> bytes:
    """Encode config as an AudioSpecificConfig, looking up missing indices."""
    w = _BitWriter()
    if config.object_type >= 32:
        w.write(AOT_ESCAPE, 5)
        w.write(config.object_type - 32, 6)
    else:
        w.write(config.object_type, 5)

    index = config.sample_rate_index
    if index == 0:
        for i, rate in enumerate(SAMPLE_RATE_TABLE):
            if rate == config.sample_rate:
                index = i
    if index >= 0xF:
        w.write(0xF, 4)
        w.write(index, 24)
    else:
        w.write(index, 4)

    channel_config = config.channel_config
    if channel_config == 0:
        for i, layout in enumerate(CHANNEL_CONFIG_TABLE):
            if layout == config.channel_layout:
                channel_config = i
    w.write(channel_config, 4)
    return w.to_bytes()


@dataclass(frozen=True)
class AACCodecData:
    """AAC stream description built from an AudioSpecificConfig."""

    config_bytes: bytes
    config: MPEG4AudioConfig

    @property
    def type(self) -> CodecType:
        return AAC

    @property
    def channel_layout(self) -> ChannelLayout:
        return self.config.channel_layout

    @property
    def sample_rate(self) -> int:
        return self.config.sample_rate

    @property
    def sample_format(self) -> SampleFormat:
        return SampleFormat.FLTP

    def packet_duration(self, data: bytes) -> timedelta:
        """Every AAC packet holds 1024 samples."""
        if not self.config.sample_rate:
            raise AACParseError("aacparser: sample rate unknown")
        return timedelta(seconds=1024) // self.config.sample_rate


def new_codec_data_from_mpeg4_audio_config(config: MPEG4AudioConfig) -> AACCodecData:
    return new_codec_data_from_mpeg4_audio_config_bytes(mpeg4_audio_config_to_bytes(config))


def new_codec_data_from_mpeg4_audio_config_bytes(data: bytes) -> AACCodecData:
    try:
        config = parse_mpeg4_audio_config_bytes(data)
    except AACParseError as exc:
        raise AACParseError(f"aacparser: parse MPEG4AudioConfig failed({exc})") from exc
    return AACCodecData(config_bytes=bytes(data), config=config)