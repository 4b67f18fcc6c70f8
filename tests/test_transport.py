import socket
import threading

import pytest

from pentode.models.url import Url
from pentode.protocol.errors import ConnectionFailedError, ProtocolError
from pentode.protocol.transport import Connection, Transport, request_line

URL = Url("gemini", "example.org", path="/page")


@pytest.fixture
def pair():
    client, server = socket.socketpair()
    yield client, server
    client.close()
    server.close()


def test_request_line():
    assert request_line(URL) == b"gemini://example.org/page\r\n"
    assert request_line(URL, "a b/c") == b"gemini://example.org/page?a%20b%2Fc\r\n"
    assert request_line(Url("gemini", "h", 1966, "/", "old"), "new") == b"gemini://h:1966/?new\r\n"


def test_status_line_then_body(pair):
    client, server = pair
    connection = Connection(client, URL)
    connection.send(request_line(URL))
    assert server.recv(1024) == b"gemini://example.org/page\r\n"

    server.sendall(b"20 text/gemini\r\n# Hi\r\nsecond\n")
    server.shutdown(socket.SHUT_WR)
    assert connection.read_status_line() == "20 text/gemini"
    assert list(connection.iter_lines()) == ["# Hi", "second"]
    connection.close()
    assert connection.closed


def test_binary_body_is_read_whole(pair):
    client, server = pair
    connection = Connection(client, URL)
    server.sendall(b"20 image/png\r\n\x89PNG\r\n\x00\x01")
    server.shutdown(socket.SHUT_WR)
    connection.read_status_line()
    assert connection.read() == b"\x89PNG\r\n\x00\x01"
    connection.close()


def test_no_status_line_is_a_protocol_error(pair):
    client, server = pair
    connection = Connection(client, URL)
    server.shutdown(socket.SHUT_WR)
    with pytest.raises(ProtocolError):
        connection.read_status_line()
    connection.close()


def test_overlong_status_line_is_a_protocol_error(pair):
    client, server = pair
    connection = Connection(client, URL)
    server.sendall(b"20 " + b"x" * 2000 + b"\r\nbody\n")
    with pytest.raises(ProtocolError):
        connection.read_status_line()
    connection.close()


def test_close_wakes_a_blocked_reader(pair):
    client, server = pair
    connection = Connection(client, URL)
    server.sendall(b"20 text/gemini\r\nfirst\n")
    connection.read_status_line()
    lines = []
    errors = []

    def read():
        try:
            lines.extend(connection.iter_lines())
        except (OSError, ValueError) as e:
            errors.append(e)

    reader = threading.Thread(target=read)
    reader.start()
    connection.close()
    reader.join(5)
    assert not reader.is_alive()
    connection.close()


def test_refused_connection():
    spare = socket.socket()
    spare.bind(("127.0.0.1", 0))
    port = spare.getsockname()[1]
    spare.close()
    with pytest.raises(ConnectionFailedError):
        Transport(connect_timeout=5).connect(Url("gemini", "127.0.0.1", port))


def test_failed_handshake():
    listener = socket.socket()
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    port = listener.getsockname()[1]

    def hang_up():
        conn, _ = listener.accept()
        conn.close()

    server = threading.Thread(target=hang_up)
    server.start()
    try:
        with pytest.raises(ConnectionFailedError):
            Transport(connect_timeout=5, read_timeout=5).connect_and_send(Url("gemini", "127.0.0.1", port))
    finally:
        server.join(5)
        listener.close()
