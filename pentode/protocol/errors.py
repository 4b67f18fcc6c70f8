"""
Exceptions raised by the Gemini client.

Every error is fatal to the single request it happened in and never to the
session: the request worker catches ClientError, reports it to the
presentation sink and goes back to "ready".
"""


class ClientError(Exception):
    """Base Gemini client error."""


class ConnectionFailedError(ClientError):
    """Raised when DNS resolution, the TCP connect or the TLS handshake fails."""


class ProtocolError(ClientError):
    """Raised when no complete status line arrives before the connection ends."""


class MalformedHeaderError(ClientError):
    """Raised when the status line is missing a field or its code is not numeric."""


class UnknownStatusError(ClientError):
    """Raised for status codes outside the documented taxonomy."""

    def __init__(self, code: int, meta: str):
        super().__init__(f"Unknown response: {code} {meta}".rstrip())
        self.code = code
        self.meta = meta


class ServerError(ClientError):
    """
    Raised for 4x and 5x responses.

    The message is the human readable name of the status with meta appended
    as detail.
    """

    def __init__(self, code: int, name: str, meta: str):
        message = f"{name}: {meta}" if meta else name
        super().__init__(message)
        self.code = code
        self.name = name
        self.meta = meta


class TooManyRedirectsError(ClientError):
    """Raised when a navigation follows more redirects than allowed."""


class SaveError(ClientError):
    """Raised when a binary body cannot be written to disk."""


class NoHistoryError(ClientError):
    """Raised when going back with fewer than two history entries."""


class InvalidURLError(ClientError):
    """Raised when user text or a redirect target cannot be turned into a URL."""


class RequestCancelledError(ClientError):
    """Raised inside a request worker once a newer navigation replaced it."""
