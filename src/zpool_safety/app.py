import faulthandler
import sys

from PySide6.QtWidgets import QApplication

from zpool_safety.gui.main_window import MainWindow
from zpool_safety.logging_setup import setup_logging


def run() -> None:
    faulthandler.enable()
    setup_logging("INFO")
    app = QApplication(sys.argv)
    app.setApplicationName("ZFS Pool Safety")

    w = MainWindow()
    w.show()

    raise SystemExit(app.exec())
