"""Tag-length-value records: a configurable decoder and a simple TLV container."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

_VALID_SIZES = (1, 2, 4)


class MessageTooShortError(ValueError):
    """Raised when the data ends before a complete record could be read."""

    def __init__(self, message: str = "tlv: message too short") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Record:
    """A single tag-length-value record."""

    tag: int
    length: int
    value: bytes


class Decoder:
    """Decodes a stream of big-endian TLV records with fixed tag and length widths."""

    def __init__(self, tag_size: int, len_size: int) -> None:
        for name, size in (("tag size", tag_size), ("len size", len_size)):
            if size not in _VALID_SIZES:
                raise ValueError(f"invalid {name}: {size}")
        self.tag_size = tag_size
        self.len_size = len_size
        self.head_size = tag_size + len_size

    def _decode_record(self, data: memoryview) -> Record:
        if len(data) < self.head_size:
            raise MessageTooShortError()
        tag = int.from_bytes(data[: self.tag_size], "big")
        length = int.from_bytes(data[self.tag_size : self.head_size], "big")
        end = self.head_size + length
        if len(data) < end:
            raise MessageTooShortError()
        return Record(tag=tag, length=length, value=bytes(data[self.head_size : end]))

    def decode(self, data: bytes) -> list[Record]:
        """Decode every record in ``data``; raise if the data is truncated."""
        view = memoryview(bytes(data))
        records: list[Record] = []
        while view:
            record = self._decode_record(view)
            records.append(record)
            view = view[self.head_size + record.length :]
        return records

    def decode_record_map(self, data: bytes) -> dict[int, bytes]:
        """Decode ``data`` into a tag-to-value mapping; later tags win."""
        return {record.tag: record.value for record in self.decode(data)}


@dataclass
class TLV:
    """A command followed by a counted list of pre-encoded elements."""

    command: int
    items: list[bytes] = field(default_factory=list)

    def marshal(self) -> bytes:
        """Encode as command (u16), element count (u16) and the elements."""
        head = struct.pack(">HH", self.command & 0xFFFF, len(self.items) & 0xFFFF)
        return head + b"".join(bytes(item) for item in self.items)

    def append(self, *args: bytes) -> None:
        """Append one or more encoded elements."""
        self.items.extend(args)