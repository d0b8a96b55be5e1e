"""Simple audio codec data descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .av import PCM_ALAW, PCM_MULAW, SPEEX, ChannelLayout, CodecType, SampleFormat

_PCM_SAMPLE_RATE = 8000


@dataclass(frozen=True)
class FakeCodecData:
    """Codec data that only records its type and audio parameters."""

    codec_type: CodecType
    sample_rate: int
    sample_format: SampleFormat
    channel_layout: ChannelLayout

    @property
    def type(self) -> CodecType:
        return self.codec_type


@dataclass(frozen=True)
class PCMUCodecData:
    """G.711 mu-law or A-law audio: 8 kHz mono."""

    codec_type: CodecType

    @property
    def type(self) -> CodecType:
        return self.codec_type

    @property
    def sample_rate(self) -> int:
        return _PCM_SAMPLE_RATE

    @property
    def channel_layout(self) -> ChannelLayout:
        return ChannelLayout.MONO

    @property
    def sample_format(self) -> SampleFormat:
        return SampleFormat.S16

    def packet_duration(self, data: bytes) -> timedelta:
        return timedelta(seconds=len(data)) // _PCM_SAMPLE_RATE


def new_pcm_mulaw_codec_data() -> PCMUCodecData:
    return PCMUCodecData(PCM_MULAW)


def new_pcm_alaw_codec_data() -> PCMUCodecData:
    return PCMUCodecData(PCM_ALAW)


@dataclass(frozen=True)
class SpeexCodecData(FakeCodecData):
    """Speex audio; every packet lasts 20 ms."""

    def packet_duration(self, data: bytes) -> timedelta:
        return timedelta(milliseconds=20)


def new_speex_codec_data(sample_rate: int, channel_layout: ChannelLayout) -> SpeexCodecData:
    return SpeexCodecData(
        codec_type=SPEEX,
        sample_rate=sample_rate,
        sample_format=SampleFormat.S16,
        channel_layout=channel_layout,
    )