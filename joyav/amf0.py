"""AMF0 value encoding and decoding as used in FLV script data."""

from __future__ import annotations

import math
import struct
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Iterator

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NUMBER_LENGTH = 9
_OBJECT_END = b"\x00\x00\x09"
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class _Marker(IntEnum):
    NUMBER = 0
    BOOLEAN = 1
    STRING = 2
    OBJECT = 3
    MOVIECLIP = 4
    NULL = 5
    UNDEFINED = 6
    REFERENCE = 7
    ECMA_ARRAY = 8
    OBJECT_END = 9
    STRICT_ARRAY = 10
    DATE = 11
    LONG_STRING = 12


class AMF0ParseError(ValueError):
    """A parse failure, chained to the failure inside a nested value."""

    def __init__(self, message: str, offset: int, next_error: AMF0ParseError | None = None):
        self.message = message
        self.offset = offset
        self.next = next_error
        super().__init__(str(self))

    def chain(self) -> Iterator[AMF0ParseError]:
        err: AMF0ParseError | None = self
        while err is not None:
            yield err
            err = err.next

    def __str__(self) -> str:
        return "amf0 parse error: " + ",".join(f"{e.message}:{e.offset}" for e in self.chain())


class AMFMap(dict):
    """An AMF0 anonymous object."""


class AMFArray(list):
    """An AMF0 strict array."""


class AMFECMAArray(dict):
    """An AMF0 associative (ECMA) array."""


def _encode_str(s: str) -> bytes:
    return s.encode(_ENCODING, _ERRORS)


def len_amf0_val(val: Any) -> int:
    """Number of bytes encode_amf0_val produces for val."""
    if val is None:
        return 1
    if isinstance(val, bool):
        return 2
    if isinstance(val, (int, float)):
        return _NUMBER_LENGTH
    if isinstance(val, str):
        u = len(_encode_str(val))
        return (3 if u <= 65536 else 5) + u
    if isinstance(val, AMFECMAArray):
        return 5 + sum(2 + len(_encode_str(k)) + len_amf0_val(v) for k, v in val.items()) + 3
    if isinstance(val, dict):
        return 1 + sum(
            2 + len(_encode_str(k)) + len_amf0_val(v) for k, v in val.items() if k
        ) + 3
    if isinstance(val, (list, tuple)):
        return 5 + sum(len_amf0_val(v) for v in val)
    if isinstance(val, datetime):
        return 1 + 8 + 2
    raise TypeError(f"amf0: unsupported value type {type(val).__name__}")


def encode_amf0_val(val: Any) -> bytes:
    """Encode a Python value as AMF0."""
    out = bytearray()
    _encode(out, val)
    return bytes(out)


def _encode_key(out: bytearray, key: str) -> None:
    raw = _encode_str(key)
    out += struct.pack(">H", len(raw) & 0xFFFF)
    out += raw


def _datetime_to_ms(val: datetime) -> float:
    if val.tzinfo is None:
        val = val.replace(tzinfo=timezone.utc)
    us = (val - _EPOCH) // timedelta(microseconds=1)
    ms = us // 1000 if us >= 0 else -((-us) // 1000)
    return float(ms)


def _encode(out: bytearray, val: Any) -> None:
    if val is None:
        out.append(_Marker.NULL)
    elif isinstance(val, bool):
        out += bytes((_Marker.BOOLEAN, 1 if val else 0))
    elif isinstance(val, (int, float)):
        out.append(_Marker.NUMBER)
        out += struct.pack(">d", float(val))
    elif isinstance(val, str):
        raw = _encode_str(val)
        if len(raw) <= 65536:
            out.append(_Marker.STRING)
            out += struct.pack(">H", len(raw) & 0xFFFF)
        else:
            out.append(_Marker.LONG_STRING)
            out += struct.pack(">I", len(raw) & 0xFFFFFFFF)
        out += raw
    elif isinstance(val, AMFECMAArray):
        out.append(_Marker.ECMA_ARRAY)
        out += struct.pack(">I", len(val))
        for k, v in val.items():
            _encode_key(out, k)
            _encode(out, v)
        out += _OBJECT_END
    elif isinstance(val, dict):
        out.append(_Marker.OBJECT)
        for k, v in val.items():
            if k:
                _encode_key(out, k)
                _encode(out, v)
        out += _OBJECT_END
    elif isinstance(val, (list, tuple)):
        out.append(_Marker.STRICT_ARRAY)
        out += struct.pack(">I", len(val))
        for v in val:
            _encode(out, v)
    elif isinstance(val, datetime):
        out.append(_Marker.DATE)
        out += struct.pack(">d", _datetime_to_ms(val))
        out += b"\x00\x00"
    else:
        raise TypeError(f"amf0: unsupported value type {type(val).__name__}")


def parse_amf0_val(b: bytes) -> tuple[Any, int]:
    """Parse one AMF0 value; return it with the number of bytes it took."""
    data = bytes(b)
    val, end = _parse(data, 0)
    return val, end


def _parse_pairs(b: bytes, pos: int, prefix: str) -> tuple[AMFMap, int]:
    obj = AMFMap()
    while True:
        if len(b) < pos + 2:
            raise AMF0ParseError(f"{prefix}.key.length", pos)
        (length,) = struct.unpack_from(">H", b, pos)
        pos += 2
        if length == 0:
            break
        if len(b) < pos + length:
            raise AMF0ParseError(f"{prefix}.key.body", pos)
        key = b[pos:pos + length].decode(_ENCODING, _ERRORS)
        pos += length
        try:
            value, pos_after = _parse(b, pos)
        except AMF0ParseError as exc:
            raise AMF0ParseError(f"{prefix}.val", pos, exc) from None
        pos = pos_after
        obj[key] = value
    if len(b) < pos + 1:
        raise AMF0ParseError(f"{prefix}.end", pos)
    return obj, pos + 1


def _parse(b: bytes, pos: int) -> tuple[Any, int]:
    if len(b) < pos + 1:
        raise AMF0ParseError("marker", pos)
    marker = b[pos]
    pos += 1

    if marker == _Marker.NUMBER:
        if len(b) < pos + 8:
            raise AMF0ParseError("number", pos)
        return struct.unpack_from(">d", b, pos)[0], pos + 8

    if marker == _Marker.BOOLEAN:
        if len(b) < pos + 1:
            raise AMF0ParseError("boolean", pos)
        return b[pos] != 0, pos + 1

    if marker == _Marker.STRING:
        if len(b) < pos + 2:
            raise AMF0ParseError("string.length", pos)
        (length,) = struct.unpack_from(">H", b, pos)
        pos += 2
        if len(b) < pos + length:
            raise AMF0ParseError("string.body", pos)
        return b[pos:pos + length].decode(_ENCODING, _ERRORS), pos + length

    if marker == _Marker.OBJECT:
        return _parse_pairs(b, pos, "object")

    if marker in (_Marker.NULL, _Marker.UNDEFINED):
        return None, pos

    if marker == _Marker.ECMA_ARRAY:
        if len(b) < pos + 4:
            raise AMF0ParseError("array.count", pos)
        return _parse_pairs(b, pos + 4, "array")

    if marker == _Marker.OBJECT_END:
        if len(b) < pos + 3:
            raise AMF0ParseError("objectend", pos)
        return None, pos + 3

    if marker == _Marker.STRICT_ARRAY:
        if len(b) < pos + 4:
            raise AMF0ParseError("strictarray.count", pos)
        (count,) = struct.unpack_from(">I", b, pos)
        pos += 4
        items = AMFArray()
        for _ in range(count):
            try:
                value, pos_after = _parse(b, pos)
            except AMF0ParseError as exc:
                raise AMF0ParseError("strictarray.val", pos, exc) from None
            pos = pos_after
            items.append(value)
        return items, pos

    if marker == _Marker.DATE:
        if len(b) < pos + 8 + 2:
            raise AMF0ParseError("date", pos)
        (ts,) = struct.unpack_from(">d", b, pos)
        if not math.isfinite(ts):
            raise AMF0ParseError("date", pos)
        try:
            value = _EPOCH + timedelta(milliseconds=int(ts))
        except OverflowError:
            raise AMF0ParseError("date", pos) from None
        return value, pos + 8 + 2

    if marker == _Marker.LONG_STRING:
        if len(b) < pos + 4:
            raise AMF0ParseError("longstring.length", pos)
        (length,) = struct.unpack_from(">I", b, pos)
        pos += 4
        if len(b) < pos + length:
            raise AMF0ParseError("longstring.body", pos)
        return b[pos:pos + length].decode(_ENCODING, _ERRORS), pos + length

    raise AMF0ParseError(f"invalidmarker={marker}", pos)