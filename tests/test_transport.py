from __future__ import annotations

import socket
import time

import pytest

from client.core import ClientSession
from server.core import ConnectionManager
from shared.protocol import TransportError, encode_frame, ping_command
from shared.transport import SocketTransport, TcpListener, open_connection


@pytest.fixture
def socket_pair():
    left, right = socket.socketpair()
    a, b = SocketTransport(left), SocketTransport(right)
    yield a, b
    a.close()
    b.close()


def test_read_write_over_socketpair(socket_pair):
    a, b = socket_pair
    assert not b.data_available()
    a.write(encode_frame(ping_command()))
    assert b.data_available(timeout=2.0)
    assert b.read() == b"ping\n"


def test_close_is_seen_as_end_of_stream(socket_pair):
    a, b = socket_pair
    a.close()
    assert a.closed
    assert b.data_available(timeout=2.0)
    assert b.read() == b""
    a.close()


def test_closed_transport_reports_no_data(socket_pair):
    a, _ = socket_pair
    a.close()
    assert a.data_available() is False


def test_write_after_close_raises(socket_pair):
    a, _ = socket_pair
    a.close()
    with pytest.raises(TransportError):
        a.write(b"ping\n")


def test_listener_accepts_connections():
    listener = TcpListener("127.0.0.1", 0)
    listener.start()
    try:
        host, port = listener.address
        assert listener.listening
        client = open_connection(host, port, timeout=2.0)
        assert listener.pending(timeout=2.0)
        server = listener.accept()
        client.write(b"hello\n")
        assert server.data_available(timeout=2.0)
        assert server.read() == b"hello\n"
        client.close()
        server.close()
    finally:
        listener.close()
    assert not listener.listening
    assert not listener.pending()


def test_accept_before_start_raises():
    with pytest.raises(TransportError):
        TcpListener("127.0.0.1", 0).accept()


def test_session_over_real_socket(server_config, client_config):
    listener = TcpListener("127.0.0.1", 0)
    listener.start()
    received = []
    manager = ConnectionManager(server_config(password="pw"), listener=listener, on_message=lambda cid, text: received.append(text))
    session = ClientSession(client_config(connect_timeout=2.0))
    try:
        assert session.connect(*listener.address, password="pw")
        deadline = time.monotonic() + 5.0
        while not session.authenticated and time.monotonic() < deadline:
            manager.tick(0.0)
            session.tick(0.0)
            time.sleep(0.01)
        assert session.authenticated

        assert session.send_message("über ☃")
        while not received and time.monotonic() < deadline:
            manager.tick(0.0)
            time.sleep(0.01)
        assert received == ["über ☃"]
    finally:
        session.disconnect()
        session.tick(0.0)
        manager.shutdown()
        manager.tick(0.0)
    assert manager.closed
    assert not listener.listening
