"""Raw AAC files made of ADTS frames."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, BinaryIO, Sequence

from .aacparser import (
    AOT_AAC_LTP,
    AACCodecData,
    AACParseError,
    MPEG4AudioConfig,
    fill_adts_header,
    new_codec_data_from_mpeg4_audio_config,
    parse_adts_header,
)
from .av import AAC, Packet
from .avutil import RegisterHandler

_PEEK_SIZE = 9
_READ_CHUNK = 4096


class Muxer:
    """Writes AAC packets, each behind an ADTS header."""

    def __init__(self, w: BinaryIO) -> None:
        self._w = w
        self._config = MPEG4AudioConfig()

    def write_header(self, streams: Sequence[Any]) -> None:
        if len(streams) != 1 or streams[0].type != AAC:
            raise ValueError("aac: must be only one aac stream")
        self._config = streams[0].config
        if self._config.object_type > AOT_AAC_LTP:
            raise ValueError(f"aac: AOT {self._config.object_type} is not allowed in ADTS")

    def write_packet(self, pkt: Packet) -> None:
        self._w.write(fill_adts_header(self._config, 1024, len(pkt.data)))
        self._w.write(pkt.data)

    def write_trailer(self) -> None:
        pass


class Demuxer:
    """Reads ADTS frames as packets; read_packet raises EOFError at the end."""

    def __init__(self, r: BinaryIO) -> None:
        self._r = r
        self._buf = bytearray()
        self._codecdata: AACCodecData | None = None
        self._ts = timedelta(0)

    def _fill(self, n: int) -> bytes:
        while len(self._buf) < n:
            chunk = self._r.read(max(n - len(self._buf), _READ_CHUNK))
            if not chunk:
                raise EOFError("aac: unexpected end of stream")
            self._buf += chunk
        return bytes(self._buf[:n])

    def streams(self) -> list[Any]:
        if self._codecdata is None:
            config, _, _, _ = parse_adts_header(self._fill(_PEEK_SIZE))
            self._codecdata = new_codec_data_from_mpeg4_audio_config(config)
        return [self._codecdata]

    def read_packet(self) -> Packet:
        config, hdrlen, framelen, samples = parse_adts_header(self._fill(_PEEK_SIZE))
        frame = self._fill(framelen)
        del self._buf[:framelen]
        if not config.sample_rate:
            raise AACParseError("aac: invalid sample rate index")
        pkt = Packet(idx=0, time=self._ts, data=frame[hdrlen:])
        self._ts += timedelta(seconds=samples) // config.sample_rate
        return pkt


def _probe(b: bytes) -> bool:
    try:
        parse_adts_header(b)
    except AACParseError:
        return False
    return True


def handler(h: RegisterHandler) -> None:
    """Register the raw AAC format."""
    h.ext = ".aac"
    h.reader_demuxer = Demuxer
    h.writer_muxer = Muxer
    h.probe = _probe
    h.codec_types = [AAC]