# pentode/session/sink.py
from abc import ABC, abstractmethod
from typing import Optional

from ..models.elements import GemtextElement


class PresentationSink(ABC):
    """
    Everything the protocol engine needs from the user interface.

    Methods are called from the request worker thread; implementations that
    own widgets must hand the work over to their own thread.
    """

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def insert_element(self, element: GemtextElement) -> None:
        raise NotImplementedError

    @abstractmethod
    def insert_raw_text(self, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_address(self, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_status_message(self, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def prompt_user(self, title: str, message: str, sensitive: bool = False) -> Optional[str]:
        """Block until the user answers; None when the prompt was cancelled."""
        raise NotImplementedError

    @abstractmethod
    def choose_save_destination(self, suggested_name: str) -> Optional[str]:
        """Block until the user picks a path; None when the dialog was cancelled."""
        raise NotImplementedError

    @abstractmethod
    def show_error_dialog(self, message: str) -> None:
        raise NotImplementedError


class ScopedSink(PresentationSink):
    """
    Forwards to another sink for as long as its request scope is live.

    Once the scope is cancelled every call is dropped, so a superseded request
    cannot touch the page of the request that replaced it.
    """

    def __init__(self, sink: PresentationSink, scope: "RequestScope"):
        self._sink = sink
        self._scope = scope

    def _forward(self, name, *args):
        with self._scope.lock:
            if self._scope.cancelled:
                return None
            return getattr(self._sink, name)(*args)

    def clear(self) -> None:
        self._forward("clear")

    def insert_element(self, element: GemtextElement) -> None:
        self._forward("insert_element", element)

    def insert_raw_text(self, text: str) -> None:
        self._forward("insert_raw_text", text)

    def set_address(self, text: str) -> None:
        self._forward("set_address", text)

    def set_status_message(self, text: str) -> None:
        self._forward("set_status_message", text)

    def show_error_dialog(self, message: str) -> None:
        self._forward("show_error_dialog", message)

    # Blocking calls must not hold the scope lock while the user is answering.
    def prompt_user(self, title: str, message: str, sensitive: bool = False) -> Optional[str]:
        if self._scope.cancelled:
            return None
        answer = self._sink.prompt_user(title, message, sensitive)
        return None if self._scope.cancelled else answer

    def choose_save_destination(self, suggested_name: str) -> Optional[str]:
        if self._scope.cancelled:
            return None
        path = self._sink.choose_save_destination(suggested_name)
        return None if self._scope.cancelled else path
