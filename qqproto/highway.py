"""Highway upload framing, addresses and session bookkeeping."""

from __future__ import annotations

import bisect
import ipaddress
import struct
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

REQ_CMD_DATA = "PicUp.DataUp"
REQ_CMD_HEART_BREAK = "PicUp.Echo"
MAX_RESPONSE_SIZE = 1024 * 100
MAX_IDLE_CONN = 7

_STX = 0x28
_ETX = 0x29


def uint32_to_ipv4(ip: int) -> str:
    """Format a 32-bit integer as a dotted IPv4 address."""
    return str(ipaddress.IPv4Address(ip & 0xFFFFFFFF))


def frame(head: bytes, body: Optional[bytes] = None) -> bytes:
    """Wrap a head and body as STX, lengths, head, body, ETX."""
    body = body or b""
    return (
        struct.pack(">BII", _STX, len(head), len(body))
        + bytes(head)
        + bytes(body)
        + bytes([_ETX])
    )


@dataclass(frozen=True)
class Addr:
    """An IPv4 address held as an integer, with a port."""

    ip: int
    port: int

    def as_ip(self) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(self.ip & 0xFFFFFFFF)

    def is_empty(self) -> bool:
        return self.ip == 0 or self.port == 0

    def __str__(self) -> str:
        return f"{uint32_to_ipv4(self.ip)}:{self.port}"


@dataclass
class PersistConn:
    """An open connection to a highway server with its last echo delay in ms."""

    conn: Any
    addr: Addr
    ping: int = 0


def _wrap_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


@dataclass
class Session:
    """Highway session: server addresses, sequence numbers and idle connections."""

    uin: str = ""
    app_id: int = 0
    sig_session: bytes = b""
    session_key: bytes = b""
    sso_addr: list[Addr] = field(default_factory=list)
    _seq: int = field(default=0, repr=False)
    _idx: int = field(default=0, repr=False)
    _idle: list[PersistConn] = field(default_factory=list, repr=False)
    _addr_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _seq_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _idle_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add_addr(self, ip: int, port: int) -> None:
        with self._addr_lock:
            self.sso_addr.append(Addr(ip=ip, port=port))

    def addr_count(self) -> int:
        with self._addr_lock:
            return len(self.sso_addr)

    def next_addr(self) -> Addr:
        """Return the next server address in round-robin order."""
        with self._addr_lock:
            if not self.sso_addr:
                raise LookupError("no highway server address")
            addr = self.sso_addr[self._idx % len(self.sso_addr)]
            self._idx = (self._idx + 1) % len(self.sso_addr)
            return addr

    def next_seq(self) -> int:
        """Advance the sequence number by two and return it."""
        with self._seq_lock:
            self._seq = _wrap_int32(self._seq + 2)
            return self._seq

    def get_idle_conn(self) -> Optional[PersistConn]:
        """Take the fastest idle connection, or None if there is none."""
        with self._idle_lock:
            return self._idle.pop(0) if self._idle else None

    def put_idle_conn(self, conn: PersistConn) -> None:
        """Return a connection to the idle pool, kept sorted by ping."""
        if conn.conn is None or conn.addr.is_empty():
            raise ValueError("put bad idle conn")
        with self._idle_lock:
            pos = bisect.bisect_left(self._idle, conn.ping, key=lambda c: c.ping)
            self._idle.insert(pos, conn)
            while len(self._idle) > MAX_IDLE_CONN:
                self._idle.pop()

    @property
    def idle_count(self) -> int:
        with self._idle_lock:
            return len(self._idle)