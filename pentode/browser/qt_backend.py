# pentode/browser/qt_backend.py
from concurrent.futures import Future
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..models.elements import GemtextElement
from ..session.sink import PresentationSink
from .tab import GeminiTab

# NOTE: the request worker calls the sink from its own thread. Signals emitted
# there are queued onto the GUI thread, which owns the tab widget.


class _SinkBridge(QObject):
    clear_requested = Signal()
    element_inserted = Signal(object)
    text_inserted = Signal(str)
    address_changed = Signal(str)
    status_changed = Signal(str)
    prompt_requested = Signal(object, str, str, bool)
    save_requested = Signal(object, str)
    error_raised = Signal(str)


class QtPresentationSink(PresentationSink):
    def __init__(self, tab: GeminiTab):
        self.tab = tab
        self._bridge = _SinkBridge()
        self._bridge.clear_requested.connect(tab.clear_page)
        self._bridge.element_inserted.connect(tab.insert_element)
        self._bridge.text_inserted.connect(tab.insert_raw_text)
        self._bridge.address_changed.connect(tab.set_address)
        self._bridge.status_changed.connect(tab.set_status)
        self._bridge.prompt_requested.connect(tab.ask_text)
        self._bridge.save_requested.connect(tab.ask_save_path)
        self._bridge.error_raised.connect(tab.show_error)

    def clear(self) -> None:
        self._bridge.clear_requested.emit()

    def insert_element(self, element: GemtextElement) -> None:
        self._bridge.element_inserted.emit(element)

    def insert_raw_text(self, text: str) -> None:
        self._bridge.text_inserted.emit(text)

    def set_address(self, text: str) -> None:
        self._bridge.address_changed.emit(text)

    def set_status_message(self, text: str) -> None:
        self._bridge.status_changed.emit(text)

    def show_error_dialog(self, message: str) -> None:
        self._bridge.error_raised.emit(message)

    def prompt_user(self, title: str, message: str, sensitive: bool = False) -> Optional[str]:
        future = Future()
        self._bridge.prompt_requested.emit(future, title, message, sensitive)
        return future.result()

    def choose_save_destination(self, suggested_name: str) -> Optional[str]:
        future = Future()
        self._bridge.save_requested.emit(future, suggested_name)
        return future.result()
