# pentode/main_window.py
from PySide6.QtWidgets import (
    QMainWindow, QLineEdit, QToolBar, QLabel
)
from PySide6.QtGui import QAction
from .address_bar import AddressBarController
from .browser.qt_backend import QtPresentationSink
from .browser.tab import GeminiTab
from .session.lifecycle import BrowserSession
from .url_router import URLRouter

class MainWindow(QMainWindow):
    def __init__(self, settings: dict, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Pentode")
        self.resize(1024, 768)

        # Page surface + session, the sink is the only link between them
        self.tab = GeminiTab(self)
        self.router = URLRouter()
        self.session = BrowserSession(QtPresentationSink(self.tab), settings, router=self.router)

        # Toolbar: back, address, go
        self.back_action = QAction("Back", self)
        self.go_action = QAction("Go", self)
        self.address_bar = QLineEdit()
        self.address_controller = AddressBarController(self.session, self.tab)
        self.address_controller.bind(self.address_bar, self.go_action, self.back_action)

        toolbar = QToolBar()
        toolbar.addAction(self.back_action)
        toolbar.addWidget(self.address_bar)
        toolbar.addAction(self.go_action)
        self.addToolBar(toolbar)

        # Status label
        self.status_label = QLabel()
        self.statusBar().addWidget(self.status_label)
        self.tab.status_changed.connect(self.status_label.setText)

        self.setCentralWidget(self.tab)

    def open(self, text: str) -> None:
        self.address_controller.navigate(text)

    def closeEvent(self, event):
        self.session.close()
        super().closeEvent(event)
