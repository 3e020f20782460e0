"""Request and packet types and a TCP connection with disconnect callbacks."""

from __future__ import annotations

import socket
import struct
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional, Union


class RequestType(IntEnum):
    """Outer packet type."""

    LOGIN = 0x0A
    SIMPLE = 0x0B


class EncryptType(IntEnum):
    """How the packet body is encrypted."""

    NO_ENCRYPT = 0x00
    D2_KEY = 0x01
    EMPTY_KEY = 0x02


@dataclass
class Request:
    """An outgoing service request."""

    type: RequestType = RequestType.SIMPLE
    encrypt_type: EncryptType = EncryptType.NO_ENCRYPT
    sequence_id: int = 0
    uin: int = 0
    command_name: str = ""
    body: bytes = b""


class RequestParams(dict):
    """Extra parameters attached to a request and handed to its decoder."""

    def get_bool(self, key: str) -> bool:
        """Return the boolean stored under ``key``, or False if absent."""
        if key not in self:
            return False
        value = self[key]
        if not isinstance(value, bool):
            raise TypeError(f"parameter {key!r} is not a bool: {value!r}")
        return value

    def get_int32(self, key: str) -> int:
        """Return the integer stored under ``key``, or 0 if absent."""
        if key not in self:
            return 0
        value = self[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"parameter {key!r} is not an int: {value!r}")
        return value


@dataclass
class Packet:
    """An incoming, already unwrapped packet."""

    sequence_id: int
    command_name: str
    payload: bytes = b""
    params: RequestParams = field(default_factory=RequestParams)


class ConnectionClosedError(ConnectionError):
    """Raised when reading or writing on a connection that is closed."""

    def __init__(self, message: str = "connection closed") -> None:
        super().__init__(message)


PlannedCallback = Callable[["TCPClient"], Any]
UnexpectedCallback = Callable[["TCPClient", BaseException], Any]


def _parse_addr(addr: Union[str, tuple]) -> tuple[str, int]:
    if isinstance(addr, tuple):
        host, port = addr
        return str(host), int(port)
    host, sep, port = str(addr).rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address: {addr!r}")
    return host.strip("[]"), int(port)


class TCPClient:
    """A TCP connection that reports planned and unexpected disconnects."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._conn: Optional[socket.socket] = None
        self._connected = False
        self._planned: Optional[PlannedCallback] = None
        self._unexpected: Optional[UnexpectedCallback] = None

    def on_planned_disconnect(self, callback: Optional[PlannedCallback]) -> None:
        """Set the callback run after close() on a live connection."""
        with self._lock:
            self._planned = callback

    def on_unexpected_disconnect(self, callback: Optional[UnexpectedCallback]) -> None:
        """Set the callback run when a read or write fails."""
        with self._lock:
            self._unexpected = callback

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connected

    def connect(self, addr: Union[str, tuple]) -> None:
        """Close any current connection and dial ``addr`` ("host:port")."""
        self.close()
        host, port = _parse_addr(addr)
        try:
            conn = socket.create_connection((host, port))
        except OSError as exc:
            raise ConnectionError(f"dial tcp error: {exc}") from exc
        with self._lock:
            self._conn = conn
            self._connected = True

    def write(self, buf: bytes) -> None:
        """Send all of ``buf``."""
        conn = self._get_conn()
        if conn is None:
            raise ConnectionClosedError()
        try:
            conn.sendall(buf)
        except OSError as exc:
            self._unexpected_close(exc)
            raise ConnectionClosedError() from exc

    def read_bytes(self, length: int) -> bytes:
        """Read exactly ``length`` bytes."""
        conn = self._get_conn()
        if conn is None:
            raise ConnectionClosedError()
        chunks = bytearray()
        try:
            while len(chunks) < length:
                chunk = conn.recv(length - len(chunks))
                if not chunk:
                    raise EOFError("unexpected end of stream")
                chunks += chunk
        except (OSError, EOFError) as exc:
            self._unexpected_close(exc)
            raise ConnectionClosedError() from exc
        return bytes(chunks)

    def read_int32(self) -> int:
        """Read a big-endian signed 32-bit integer."""
        return struct.unpack(">i", self.read_bytes(4))[0]

    def close(self) -> None:
        """Close the connection and report a planned disconnect."""
        self._close()
        with self._lock:
            callback = self._planned
            if callback is not None and self._connected:
                self._connected = False
                threading.Thread(target=callback, args=(self,), daemon=True).start()

    def _unexpected_close(self, error: BaseException) -> None:
        self._close()
        with self._lock:
            callback = self._unexpected
            if callback is not None and self._connected:
                self._connected = False
                threading.Thread(target=callback, args=(self, error), daemon=True).start()

    def _close(self) -> None:
        with self._lock:
            if self._conn is not None:
                try:
                    self._conn.close()
                except OSError:
                    pass
                self._conn = None

    def _get_conn(self) -> Optional[socket.socket]:
        with self._lock:
            return self._conn