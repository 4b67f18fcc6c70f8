import os
import threading

import pytest

# Qt widgets in the shell tests must not need a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from pentode.models.url import Url
from pentode.protocol.transport import encode_query
from pentode.session.sink import PresentationSink


class RecordingSink(PresentationSink):
    def __init__(self, answers=None, save_path=None):
        self.calls = []
        self.answers = list(answers or [])
        self.save_path = save_path
        self.prompts = []

    def clear(self):
        self.calls.append(("clear",))

    def insert_element(self, element):
        self.calls.append(("insert_element", element))

    def insert_raw_text(self, text):
        self.calls.append(("insert_raw_text", text))

    def set_address(self, text):
        self.calls.append(("set_address", text))

    def set_status_message(self, text):
        self.calls.append(("set_status_message", text))

    def prompt_user(self, title, message, sensitive=False):
        self.prompts.append((title, message, sensitive))
        return self.answers.pop(0) if self.answers else None

    def choose_save_destination(self, suggested_name):
        self.calls.append(("choose_save_destination", suggested_name))
        return self.save_path

    def show_error_dialog(self, message):
        self.calls.append(("show_error_dialog", message))

    def named(self, *names):
        return [call for call in self.calls if call[0] in names]

    def page(self):
        return self.named("clear", "insert_element", "insert_raw_text")


class FakeConnection:
    def __init__(self, body=None):
        self.body = body if body is not None else []
        self.closed = False

    def iter_lines(self, encoding="utf-8"):
        yield from self.body

    def read(self):
        return self.body if isinstance(self.body, bytes) else "\n".join(self.body).encode()

    def close(self):
        self.closed = True


class BlockingConnection(FakeConnection):
    """Yields its lines, then blocks like a slow server until closed."""

    def __init__(self, body):
        super().__init__(body)
        self.waiting = threading.Event()
        self._released = threading.Event()

    def iter_lines(self, encoding="utf-8"):
        yield from self.body
        self.waiting.set()
        self._released.wait(5)
        if self.closed:
            raise ValueError("I/O operation on closed file")

    def close(self):
        super().close()
        self._released.set()


class FakeTransport:
    """
    Serves canned responses keyed by the full request URL.

    Requests for a URL in hold stop after the connection is registered, as if
    the status line had arrived, until release is set.
    """

    def __init__(self, responses, hold=()):
        self.responses = responses
        self.hold = set(hold)
        self.holding = threading.Event()
        self.release = threading.Event()
        self.requests = []
        self.connections = []

    def connect_and_send(self, url: Url, query=None, register=None):
        key = str(url.with_query(encode_query(query))) if query is not None else str(url)
        self.requests.append((str(url), query))
        response = self.responses[key]
        if isinstance(response, Exception):
            raise response
        line, body = response
        connection = body if isinstance(body, FakeConnection) else FakeConnection(body)
        self.connections.append(connection)
        if register is not None:
            register(connection)
        if key in self.hold:
            self.holding.set()
            self.release.wait(5)
        return line, connection


@pytest.fixture
def sink():
    return RecordingSink()
