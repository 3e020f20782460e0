"""Proof-of-work challenge solver used during login."""

from __future__ import annotations

import hashlib
import struct
import time


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, n: int) -> bytes:
        end = self._pos + n
        if end > len(self._data):
            raise ValueError("pow challenge is truncated")
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def uint16(self) -> int:
        return struct.unpack(">H", self.take(2))[0]

    def bytes_short(self) -> bytes:
        return self.take(self.uint16())


def _short(data: bytes) -> bytes:
    return struct.pack(">H", len(data) & 0xFFFF) + data


def _to_bytes(n: int) -> bytes:
    return n.to_bytes((n.bit_length() + 7) // 8, "big")


def calc_pow(data: bytes) -> bytes:
    """Solve a proof-of-work challenge and return the answer record.

    For challenge type 2 with a 32-byte target, the source number is
    incremented until its SHA-256 equals the target.
    """
    r = _Reader(data)
    a = r.byte()
    typ = r.byte()
    c = r.byte()
    ok = r.byte() != 0
    e = r.uint16()
    f = r.uint16()
    src = r.bytes_short()
    tgt = r.bytes_short()
    cpy = r.bytes_short()

    dst = b""
    elapsed = 0
    count = 0
    if typ == 2 and len(tgt) == 32:
        start = time.monotonic()
        number = int.from_bytes(src, "big")
        candidate = _to_bytes(number)
        while hashlib.sha256(candidate).digest() != tgt:
            number += 1
            candidate = _to_bytes(number)
            count = (count + 1) & 0xFFFFFFFF
        ok = True
        dst = candidate
        elapsed = int((time.monotonic() - start) * 1000) & 0xFFFFFFFF

    out = bytes([a, typ, c, 1 if ok else 0]) + struct.pack(">HH", e, f)
    out += _short(src) + _short(tgt) + _short(cpy)
    if ok:
        out += _short(dst) + struct.pack(">II", elapsed, count)
    return out