# pentode/app.py
import logging
import sys
from PySide6.QtWidgets import QApplication
from .main_window import MainWindow
from .settings import load_settings

class PentodeApp(QApplication):
    def __init__(self, argv):
        super().__init__(argv)
        self.setApplicationName("Pentode")

def main():
    settings = load_settings()
    logging.basicConfig(
        level=settings["log"]["level"],
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    app = PentodeApp(sys.argv)
    win = MainWindow(settings=settings)
    win.show()
    if settings.get("home"):
        win.open(settings["home"])
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
