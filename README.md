# qqproto

Building blocks for a QQ chat protocol client, in plain Python with no
third-party dependencies.

## Modules

- `qqproto.tlv` – `Decoder(tag_size, len_size)` reads big-endian
  tag-length-value records (widths of 1, 2 or 4 bytes) with `decode()` into
  `Record` objects or `decode_record_map()` into a dict; truncated input raises
  `MessageTooShortError`. `TLV` holds a command and a list of encoded items,
  and `marshal()` writes command, item count and items.
- `qqproto.highway` – `frame(head, body)` returns the highway wire frame
  (0x28, head length, body length, head, body, 0x29) as bytes;
  `uint32_to_ipv4()`; `Addr`; `PersistConn`; and a `Session` that keeps server
  addresses (`add_addr`, `addr_count`, round-robin `next_addr`), a sequence
  counter stepping by two (`next_seq`) and an idle connection pool sorted by
  ping and capped at seven (`get_idle_conn`, `put_idle_conn`).
- `qqproto.network` – `RequestType`, `EncryptType`, `Request`, `Packet`,
  `RequestParams` (`get_bool`, `get_int32`) and a `TCPClient` whose `close()`
  and failed reads or writes run the callbacks set with
  `on_planned_disconnect` and `on_unexpected_disconnect`; closed connections
  raise `ConnectionClosedError`.
- `qqproto.auth` – `ProtocolType` with `version()`, the built-in
  `APP_VERSIONS` table, `SigType` flags, `AppVersion` with
  `update_from_json()`, and `SigInfo`.
- `qqproto.pow` – `calc_pow(data)` answers the login proof-of-work challenge.
- `qqproto.device` – `Device` and `OSVersion`; `to_json()` writes a device
  file, `read_json()` loads one and derives a new GUID and TGTGT key.
- `qqproto.statistics` – thread-safe `Statistics` counters with `add()`,
  `as_dict()` and `to_json()`.
- `qqproto.intern` – `StringInterner`.
- `qqproto.notify` – `HonorType`, group and friend notify events,
  `process_gray_tip()`, `parse_tip_commands()` and
  `parse_special_title_update()`.
- `qqproto.richmsg` – `MusicType`, `music_info()`, `message_style()` and
  `UrlSecurityLevel`.
- `qqproto.http_api` – parsers for group honor pages, notice lists, notice
  image uploads and notice send responses; notice form bodies; and
  `split_tts_chunks()` for chunked text-to-speech responses.
- `qqproto.forward` – `forward_display()`, `forward_preview_line()` and
  `forward_summary()` for forwarded chat record cards.

## Installation

```
pip install .
```

## Examples

```python
from qqproto.tlv import Decoder

records = Decoder(2, 2).decode_record_map(b"\x00\x01\x00\x02hi")
assert records[1] == b"hi"
```

```python
from qqproto.highway import frame

wire = frame(b"head", b"body")
assert wire[0] == 0x28 and wire[-1] == 0x29
```

```python
from qqproto.statistics import Statistics

stats = Statistics()
stats.add("packet_sent", 1)
print(stats.to_json())
```

## What it does not do

This is a toolkit, not a client. It does not log in, encrypt or pack
service packets, encode protobuf messages, send or receive chat messages,
upload files over the highway, or make HTTP requests: the `http_api`
functions only parse responses and build request bodies that you send
yourself. There is no command-line program.

## Running the tests

```
pip install .[test]
pytest
```