from concurrent.futures import Future
from typing import List

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QTextBrowser, QInputDialog, QLineEdit, QFileDialog, QMessageBox
)
from PySide6.QtGui import QTextCursor, QTextCharFormat, QFont, QColor
from PySide6.QtCore import QUrl, Signal

from ..models.elements import GemtextElement, Heading, Link

LINK_SCHEME = "link"
HEADING_SIZES = {1: 20, 2: 16, 3: 13}


class GeminiTab(QWidget):
    """Scrollable page surface. Every slot here runs on the GUI thread."""
    url_changed = Signal(str)
    status_changed = Signal(str)
    link_activated = Signal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._view = QTextBrowser()
        self._view.setOpenLinks(False)
        self._view.setOpenExternalLinks(False)
        self._view.anchorClicked.connect(self._on_anchor_clicked)
        self._links: List[Link] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._view)

    # ----- page content -----
    def clear_page(self):
        self._links.clear()
        self._view.clear()

    def insert_element(self, element: GemtextElement):
        fmt = QTextCharFormat()
        if isinstance(element, Link):
            # The anchor only carries an index; clicks map back to the element
            fmt.setAnchor(True)
            fmt.setAnchorHref(f"{LINK_SCHEME}:{len(self._links)}")
            fmt.setForeground(QColor("#1a5fb4"))
            fmt.setFontUnderline(True)
            fmt.setToolTip(element.target)
            self._links.append(element)
            self._insert(element.label, fmt)
        elif isinstance(element, Heading):
            fmt.setFontWeight(QFont.Weight.Bold.value)
            fmt.setFontPointSize(HEADING_SIZES[element.level])
            self._insert(element.text, fmt)
        else:
            self._insert(element.text, fmt)

    def insert_raw_text(self, text: str):
        self._insert(text, QTextCharFormat())

    def _insert(self, text: str, fmt: QTextCharFormat):
        cursor = self._view.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)
        cursor.insertText(text, fmt)

    def page_text(self) -> str:
        return self._view.toPlainText()

    def links(self) -> List[Link]:
        return list(self._links)

    def _on_anchor_clicked(self, qurl: QUrl):
        href = qurl.toString()
        if not href.startswith(f"{LINK_SCHEME}:"):
            return
        index = int(href[len(LINK_SCHEME) + 1:])
        if 0 <= index < len(self._links):
            self.link_activated.emit(self._links[index])

    # ----- chrome -----
    def set_address(self, text: str):
        self.url_changed.emit(text)

    def set_status(self, text: str):
        self.status_changed.emit(text)

    def show_error(self, message: str):
        QMessageBox.warning(self, "Pentode", message)

    # ----- blocking questions from the request worker -----
    def ask_text(self, future: Future, title: str, message: str, sensitive: bool):
        if not future.set_running_or_notify_cancel():
            return
        mode = QLineEdit.EchoMode.Password if sensitive else QLineEdit.EchoMode.Normal
        text, ok = QInputDialog.getText(self, title, message, mode)
        future.set_result(text if ok else None)

    def ask_save_path(self, future: Future, suggested_name: str):
        if not future.set_running_or_notify_cancel():
            return
        path, _ = QFileDialog.getSaveFileName(self, "Save file", suggested_name)
        future.set_result(path or None)
