# joyav

A pure-Python toolkit for working with compressed audio/video streams.
It provides the packet and codec-data model, a packet buffer and an audio
timeline, a registry of format handlers, a reader and writer for raw ADTS
AAC files, and the low-level pieces of FLV: tag and file headers and AMF0
values. It can also split H.264 byte streams into NAL units.

## Installation

```
pip install .
```

Python 3.10 or later is required; there are no third-party dependencies.

## Modules

- `joyav.av`: `SampleFormat`, `ChannelLayout`, `CodecType` (with the `H264`, `AAC`,
  `PCM_MULAW`, `PCM_ALAW`, `SPEEX` and `NELLYMOSER` values), `Packet`, `AudioFrame`
  (`duration`, `has_same_format`, `slice`, `concat`), and the `Demuxer`, `Muxer`,
  `AudioEncoder`, `AudioDecoder` and `AudioResampler` protocols. Demuxers raise
  `EOFError` when no packets are left.
- `joyav.codecs`: `FakeCodecData`, `PCMUCodecData` (8 kHz mono G.711, via
  `new_pcm_mulaw_codec_data` / `new_pcm_alaw_codec_data`) and `SpeexCodecData`
  (20 ms packets, via `new_speex_codec_data`).
- `joyav.pktbuf`: `Buf`, a FIFO of packets addressed by ever-increasing positions.
- `joyav.timeline`: `Timeline`, which maps durations of re-encoded audio back onto
  input timestamps.
- `joyav.avutil`: `RegisterHandler` and `Handlers`, a registry that opens demuxers
  and creates muxers by URL handler, file extension or content probe;
  `DEFAULT_HANDLERS`, `open`, `create`, `copy_packets` and `copy_file`.
- `joyav.aacparser`: `MPEG4AudioConfig`, `parse_adts_header`, `fill_adts_header`,
  `parse_mpeg4_audio_config_bytes`, `mpeg4_audio_config_to_bytes` and `AACCodecData`.
- `joyav.aacfile`: an ADTS `.aac` `Muxer` and `Demuxer`, and `handler` to register
  them with a `Handlers` registry.
- `joyav.h264nalu`: `split_nalus`, `check_nalus_type` and `is_data_nalu`, detecting
  AVCC or Annex B delimiting (`NaluFormat`).
- `joyav.flvio`: FLV `Tag` sub-headers, `read_tag` / `write_tag`, tag header and
  trailer helpers, `fill_file_header` / `parse_file_header`, and `ts_to_time` /
  `time_to_ts`.
- `joyav.amf0`: `encode_amf0_val`, `len_amf0_val` and `parse_amf0_val`, with
  `AMFMap`, `AMFArray`, `AMFECMAArray` and `AMF0ParseError`.

## Examples

Copy an AAC file through the handler registry:

```python
from joyav import aacfile, avutil

avutil.DEFAULT_HANDLERS.add(aacfile.handler)

src = avutil.open("input.aac")
dst = avutil.create("output.aac")
try:
    avutil.copy_file(dst, src)
finally:
    dst.close()
    src.close()
```

Split an Annex B buffer into NAL units:

```python
from joyav.h264nalu import NaluFormat, split_nalus

nalus, fmt = split_nalus(bytes.fromhex("0000000167640000000168ee"))
assert fmt is NaluFormat.ANNEXB
assert nalus == [b"\x67\x64", b"\x68\xee"]
```

Write an FLV audio tag and read it back:

```python
import io
from joyav import flvio

tag = flvio.Tag(tag_type=flvio.TAG_AUDIO, sound_format=flvio.SOUND_AAC,
                aac_packet_type=flvio.AAC_RAW, data=b"\x01\x02")
buf = io.BytesIO()
flvio.write_tag(buf, tag, 40)
buf.seek(0)
read, ts = flvio.read_tag(buf)
assert ts == 40 and read.data == b"\x01\x02"
```

Encode and parse an AMF0 value:

```python
from joyav.amf0 import AMFMap, encode_amf0_val, parse_amf0_val

raw = encode_amf0_val(AMFMap(width=640.0, stereo=True))
value, used = parse_amf0_val(raw)
assert value == {"width": 640.0, "stereo": True} and used == len(raw)
```

## What it does not do

- There is no FLV muxer or demuxer: `joyav.flvio` reads and writes single tags and
  the file header, but does not turn tags into packets or streams.
- H.264 support stops at NAL unit splitting; sequence parameter sets, slice headers
  and decoder configuration records are not parsed.
- No packet filters (key-frame waiting, timestamp fixing, A/V sync, real-time pacing)
  are provided.
- No audio encoders, decoders or resamplers are included; `Handlers.new_audio_encoder`
  and `Handlers.new_audio_decoder` only find ones that have been registered.
- No network protocols are included; URLs with a scheme are opened only through
  registered `url_reader`, `url_demuxer` or `url_muxer` handlers.
- There is no command-line tool.

## Tests

```
pip install .[test]
pytest
```