# pentode/protocol/transport.py
import logging
import socket
import ssl
import threading
import urllib.parse
from typing import Callable, Iterator, Optional, Tuple

from ..models.url import Url
from .errors import ConnectionFailedError, ProtocolError

logger = logging.getLogger(__name__)

CRLF = b"\r\n"
# two digit code, a space, up to 1024 bytes of meta and the CRLF
MAX_STATUS_LINE = 1029


def encode_query(query: str) -> str:
    return urllib.parse.quote(query, safe="")


def request_line(url: Url, query: Optional[str] = None) -> bytes:
    """Build the single line sent to the server, query percent-encoded."""
    if query is not None:
        url = url.with_query(encode_query(query))
    return str(url).encode("utf-8") + CRLF


def _tls_context() -> ssl.SSLContext:
    # TLS is mandatory but certificates are not checked against a CA store
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


class Connection:
    """
    One request/response exchange over an open socket.

    The status line and the body are read from the same buffered file. close()
    may be called from any thread and wakes up a reader blocked on the socket.
    """

    def __init__(self, sock: socket.socket, url: Url):
        self.url = url
        self._sock = sock
        self._file = sock.makefile("rb")
        self._lock = threading.Lock()
        self.closed = False

    def send(self, line: bytes) -> None:
        logger.debug("Sending %r", line)
        self._sock.sendall(line)

    def read_status_line(self) -> str:
        try:
            raw = self._file.readline(MAX_STATUS_LINE)
        except OSError as e:
            raise ProtocolError(f"Connection to {self.url.host} failed before a status line: {e}") from e
        if not raw:
            raise ProtocolError(f"{self.url.host} closed the connection without a status line")
        if not raw.endswith(b"\n"):
            raise ProtocolError(
                f"Status line from {self.url.host} is longer than {MAX_STATUS_LINE} bytes or unterminated"
            )
        line = raw.decode("utf-8", errors="replace")
        logger.debug("Status line from %s: %r", self.url.host, line)
        return line.rstrip("\r\n")

    def iter_lines(self, encoding: str = "utf-8") -> Iterator[str]:
        """Yield decoded body lines, line endings stripped, until the server closes."""
        for raw in self._file:
            yield raw.decode(encoding, errors="replace").rstrip("\r\n")

    def read(self) -> bytes:
        return self._file.read()

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
        try:
            # shutdown interrupts a recv blocked in another thread, close alone does not
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._file.close()
        self._sock.close()
        logger.debug("Closed connection to %s", self.url.host)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class Transport:
    """Opens TLS connections and sends one request line on each."""

    def __init__(self, connect_timeout: Optional[float] = None, read_timeout: Optional[float] = None):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._context = _tls_context()

    def open(self, url: Url) -> socket.socket:
        try:
            sock = socket.create_connection((url.host, url.port), timeout=self.connect_timeout)
        except OSError as e:
            raise ConnectionFailedError(f"Cannot reach {url.host}:{url.port}: {e}") from e
        try:
            tls = self._context.wrap_socket(sock, server_hostname=url.host)
        except (ssl.SSLError, OSError) as e:
            sock.close()
            raise ConnectionFailedError(f"TLS handshake with {url.host} failed: {e}") from e
        tls.settimeout(self.read_timeout)
        logger.debug("Established %s connection to %s:%s", tls.version(), url.host, url.port)
        return tls

    def connect(self, url: Url, query: Optional[str] = None) -> Connection:
        """Connect to url's host and write the request line."""
        connection = Connection(self.open(url), url)
        try:
            connection.send(request_line(url, query))
        except OSError as e:
            connection.close()
            raise ConnectionFailedError(f"Cannot send request to {url.host}: {e}") from e
        return connection

    def connect_and_send(
        self,
        url: Url,
        query: Optional[str] = None,
        register: Optional[Callable[[Connection], None]] = None,
    ) -> Tuple[str, Connection]:
        """
        Send the request and read the status line.

        register is called with the connection as soon as it is open so that
        the caller can close it while the status line is still pending. The
        returned connection is left open for the body.
        """
        connection = self.connect(url, query)
        if register is not None:
            register(connection)
        try:
            return connection.read_status_line(), connection
        except ProtocolError:
            connection.close()
            raise
