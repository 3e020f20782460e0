import socket
import struct
import threading

import pytest

from qqproto.network import (
    ConnectionClosedError,
    Packet,
    RequestParams,
    TCPClient,
)


@pytest.fixture
def server():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    yield srv
    srv.close()


def _connect(server):
    client = TCPClient()
    host, port = server.getsockname()
    client.connect(f"{host}:{port}")
    peer, _ = server.accept()
    return client, peer


def test_write_reaches_peer(server):
    client, peer = _connect(server)
    try:
        client.write(b"hello")
        assert peer.recv(5) == b"hello"
    finally:
        peer.close()
        client.close()


def test_read_int32_is_big_endian_signed(server):
    client, peer = _connect(server)
    try:
        peer.sendall(struct.pack(">i", -5) + struct.pack(">i", 1024))
        assert client.read_int32() == -5
        assert client.read_int32() == 1024
    finally:
        peer.close()
        client.close()


def test_read_bytes_exact_length(server):
    client, peer = _connect(server)
    try:
        peer.sendall(b"abc")
        peer.sendall(b"def")
        assert client.read_bytes(6) == b"abcdef"
    finally:
        peer.close()
        client.close()


def test_peer_close_triggers_unexpected_disconnect(server):
    client, peer = _connect(server)
    fired = threading.Event()
    errors = []

    def on_unexpected(c, err):
        errors.append((c, err))
        fired.set()

    client.on_unexpected_disconnect(on_unexpected)
    peer.close()
    with pytest.raises(ConnectionClosedError):
        client.read_bytes(4)
    assert fired.wait(2)
    assert errors[0][0] is client
    assert client.connected is False
    with pytest.raises(ConnectionClosedError):
        client.write(b"x")


def test_close_triggers_planned_disconnect_once(server):
    client, peer = _connect(server)
    calls = []
    fired = threading.Event()

    def on_planned(c):
        calls.append(c)
        fired.set()

    client.on_planned_disconnect(on_planned)
    client.close()
    assert fired.wait(2)
    client.close()
    peer.close()
    assert calls == [client]
    assert client.connected is False


def test_io_without_connection_raises():
    client = TCPClient()
    with pytest.raises(ConnectionClosedError):
        client.write(b"data")
    with pytest.raises(ConnectionClosedError):
        client.read_int32()


def test_connect_refused_raises():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = TCPClient()
    with pytest.raises(ConnectionError):
        client.connect(("127.0.0.1", port))
    assert client.connected is False


def test_connect_rejects_address_without_port():
    with pytest.raises(ValueError):
        TCPClient().connect("localhost")


def test_request_params_defaults_and_values():
    params = RequestParams({"flag": True, "count": 7})
    assert params.get_bool("flag") is True
    assert params.get_bool("missing") is False
    assert params.get_int32("count") == 7
    assert params.get_int32("missing") == 0


def test_request_params_wrong_type():
    params = RequestParams({"flag": 1, "count": "x"})
    with pytest.raises(TypeError):
        params.get_bool("flag")
    with pytest.raises(TypeError):
        params.get_int32("count")


def test_packet_default_params_are_empty():
    packet = Packet(sequence_id=3, command_name="Heartbeat.Alive")
    assert packet.params.get_bool("anything") is False
    assert packet.payload == b""