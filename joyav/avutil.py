"""Registry of container handlers and helpers to open, create and copy media."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Optional, Sequence
from urllib.parse import urlsplit

from .av import AudioDecoder, AudioEncoder, CodecType, Demuxer, Muxer, Packet

_LISTEN_PREFIX = "listen:"
_PROBE_SIZE = 1024


class HandlerDemuxer:
    """A demuxer that owns the stream it reads from and closes it."""

    def __init__(self, demuxer: Demuxer, reader: BinaryIO) -> None:
        self.demuxer = demuxer
        self._reader = reader

    def streams(self) -> list[Any]:
        return self.demuxer.streams()

    def read_packet(self) -> Packet:
        return self.demuxer.read_packet()

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> HandlerDemuxer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class HandlerMuxer:
    """A muxer that owns its output; header and trailer are written at most once."""

    def __init__(self, muxer: Muxer, writer: BinaryIO) -> None:
        self.muxer = muxer
        self._writer = writer
        self._stage = 0

    def write_header(self, streams: Sequence[Any]) -> None:
        if self._stage == 0:
            self.muxer.write_header(streams)
            self._stage += 1

    def write_packet(self, pkt: Packet) -> None:
        self.muxer.write_packet(pkt)

    def write_trailer(self) -> None:
        if self._stage == 1:
            self._stage += 1
            self.muxer.write_trailer()

    def close(self) -> None:
        self.write_trailer()
        self._writer.close()

    def __enter__(self) -> HandlerMuxer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class RegisterHandler:
    """What one container format or codec library can do.

    URL and server openers return None when they do not handle a URI.
    """

    ext: str = ""
    reader_demuxer: Optional[Callable[[BinaryIO], Demuxer]] = None
    writer_muxer: Optional[Callable[[BinaryIO], Muxer]] = None
    url_muxer: Optional[Callable[[str], Any]] = None
    url_demuxer: Optional[Callable[[str], Any]] = None
    url_reader: Optional[Callable[[str], Optional[BinaryIO]]] = None
    probe: Optional[Callable[[bytes], bool]] = None
    audio_encoder: Optional[Callable[[CodecType], Optional[AudioEncoder]]] = None
    audio_decoder: Optional[Callable[[Any], Optional[AudioDecoder]]] = None
    server_demuxer: Optional[Callable[[str], Any]] = None
    server_muxer: Optional[Callable[[str], Any]] = None
    codec_types: list[CodecType] = field(default_factory=list)


class _ChainReader(io.RawIOBase):
    """Yields already-read probe bytes, then the rest of a stream."""

    def __init__(self, prefix: bytes, reader: BinaryIO) -> None:
        super().__init__()
        self._prefix = prefix
        self._reader = reader

    def readable(self) -> bool:
        return True

    def readinto(self, buf: Any) -> int:
        if self._prefix:
            n = min(len(buf), len(self._prefix))
            buf[:n] = self._prefix[:n]
            self._prefix = self._prefix[n:]
            return n
        data = self._reader.read(len(buf))
        if not data:
            return 0
        n = len(data)
        buf[:n] = data
        return n


def _path_ext(path: str) -> str:
    base = path.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def _split_uri(uri: str) -> tuple[str, str]:
    """Scheme of the URI and the extension of its path."""
    try:
        parts = urlsplit(uri)
    except ValueError:
        return "", _path_ext(uri)
    if parts.scheme:
        return parts.scheme, _path_ext(parts.path)
    return "", _path_ext(uri)


def _strip_listen(uri: str) -> tuple[str, bool]:
    if uri.startswith(_LISTEN_PREFIX):
        return uri[len(_LISTEN_PREFIX):], True
    return uri, False


def _read_full(reader: BinaryIO, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        data = reader.read(size - len(chunks))
        if not data:
            break
        chunks += data
    return bytes(chunks)


class Handlers:
    """An ordered collection of registered handlers."""

    def __init__(self) -> None:
        self.handlers: list[RegisterHandler] = []

    def add(self, fn: Callable[[RegisterHandler], None]) -> None:
        """Register a handler filled in by fn."""
        handler = RegisterHandler()
        fn(handler)
        self.handlers.append(handler)

    def _open_url(self, scheme: str, uri: str) -> BinaryIO:
        if scheme:
            for handler in self.handlers:
                if handler.url_reader is not None:
                    reader = handler.url_reader(uri)
                    if reader is not None:
                        return reader
            raise LookupError(f"avutil: openUrl {uri} failed")
        return io.open(uri, "rb")

    def new_audio_encoder(self, codec_type: CodecType) -> AudioEncoder:
        for handler in self.handlers:
            if handler.audio_encoder is not None:
                try:
                    encoder = handler.audio_encoder(codec_type)
                except Exception:
                    encoder = None
                if encoder is not None:
                    return encoder
        raise LookupError(f"avutil: encoder {codec_type} not found")

    def new_audio_decoder(self, codec: Any) -> AudioDecoder:
        for handler in self.handlers:
            if handler.audio_decoder is not None:
                try:
                    decoder = handler.audio_decoder(codec)
                except Exception:
                    decoder = None
                if decoder is not None:
                    return decoder
        raise LookupError(f"avutil: decoder {codec.type} not found")

    def open(self, uri: str) -> Any:
        """Open a demuxer for a URI, a file path or a listening address."""
        uri, listen = _strip_listen(uri)

        for handler in self.handlers:
            opener = handler.server_demuxer if listen else handler.url_demuxer
            if opener is not None:
                demuxer = opener(uri)
                if demuxer is not None:
                    return demuxer

        scheme, ext = _split_uri(uri)
        if ext:
            for handler in self.handlers:
                if handler.ext == ext and handler.reader_demuxer is not None:
                    reader = self._open_url(scheme, uri)
                    return HandlerDemuxer(handler.reader_demuxer(reader), reader)

        reader = self._open_url(scheme, uri)
        probe = _read_full(reader, _PROBE_SIZE)
        if len(probe) < _PROBE_SIZE:
            reader.close()
            raise EOFError(f"avutil: {uri} too short to probe")

        for handler in self.handlers:
            if (
                handler.probe is not None
                and handler.probe(probe)
                and handler.reader_demuxer is not None
            ):
                seekable = getattr(reader, "seekable", None)
                if seekable is not None and seekable():
                    reader.seek(0)
                    source: Any = reader
                else:
                    source = _ChainReader(probe, reader)
                return HandlerDemuxer(handler.reader_demuxer(source), reader)

        reader.close()
        raise LookupError(f"avutil: open {uri} failed")

    def create(self, uri: str) -> Any:
        """Create a muxer for a URI or file path."""
        _, muxer = self.find_create(uri)
        return muxer

    def find_create(self, uri: str) -> tuple[RegisterHandler, Any]:
        """Create a muxer and return it with the handler that made it."""
        uri, listen = _strip_listen(uri)

        for handler in self.handlers:
            creator = handler.server_muxer if listen else handler.url_muxer
            if creator is not None:
                muxer = creator(uri)
                if muxer is not None:
                    return handler, muxer

        _, ext = _split_uri(uri)
        if ext:
            for handler in self.handlers:
                if handler.ext == ext and handler.writer_muxer is not None:
                    writer = io.open(uri, "wb")
                    return handler, HandlerMuxer(handler.writer_muxer(writer), writer)

        raise LookupError(f"avutil: create muxer {uri} failed")


DEFAULT_HANDLERS = Handlers()


def open(uri: str) -> Any:
    """Open a demuxer using the default handlers."""
    return DEFAULT_HANDLERS.open(uri)


def create(uri: str) -> Any:
    """Create a muxer using the default handlers."""
    return DEFAULT_HANDLERS.create(uri)


def copy_packets(dst: Any, src: Any) -> None:
    """Copy packets from src to dst until src is exhausted."""
    while True:
        try:
            pkt = src.read_packet()
        except EOFError:
            return
        dst.write_packet(pkt)


def copy_file(dst: Muxer, src: Demuxer) -> None:
    """Copy header, packets and trailer from src to dst."""
    dst.write_header(src.streams())
    copy_packets(dst, src)
    dst.write_trailer()