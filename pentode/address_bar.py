# pentode/address_bar.py
import logging

from PySide6.QtWidgets import QLineEdit
from PySide6.QtGui import QAction

from .session.lifecycle import BrowserSession, READY
from .browser.tab import GeminiTab

logger = logging.getLogger(__name__)

class AddressBarController:
    def __init__(self, session: BrowserSession, tab: GeminiTab):
        self.session = session
        self.tab = tab
        self.line_edit: QLineEdit | None = None
        self.back_action: QAction | None = None

    def bind(self, line_edit: QLineEdit, go_action: QAction, back_action: QAction) -> None:
        self.line_edit = line_edit
        self.back_action = back_action
        self.line_edit.returnPressed.connect(self._on_submit)
        go_action.triggered.connect(self._on_submit)
        back_action.triggered.connect(self.session.back)
        back_action.setEnabled(False)

        self.tab.url_changed.connect(self._on_tab_url_changed)
        self.tab.status_changed.connect(self._on_status_changed)
        self.tab.link_activated.connect(self.session.follow)

    def navigate(self, text: str) -> None:
        if self.line_edit:
            self.line_edit.setText(text)
        self.session.go(text)

    def _on_tab_url_changed(self, url: str):
        if self.line_edit:
            self.line_edit.setText(url)

    def _on_status_changed(self, message: str):
        if message == READY and self.back_action:
            self.back_action.setEnabled(self.session.history.back_enabled())

    def _on_submit(self) -> None:
        if not self.line_edit:
            return
        text = self.line_edit.text()
        logger.debug("Address submitted: %r", text)
        self.session.go(text)
