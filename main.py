"""
main.py
Entry point for Folder Player.

Dependencies:
    pip install PyQt6 python-vlc mutagen
    sudo apt install vlc
"""
import logging
import os
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from config.log_config import setup_logging
from core.errors       import EngineFailure


def main() -> int:
    setup_logging()
    log = logging.getLogger("main")
    app = QApplication(sys.argv)
    app.setApplicationName("Folder Player")

    try:
        # libvlc is loaded when the window module imports vlc
        from ui.main_window import MainWindow
        window = MainWindow()
    except (EngineFailure, OSError) as e:
        log.exception("Startup error")
        QMessageBox.critical(None, "Startup error", str(e))
        return 1
    window.show()

    # Open a folder passed as argument (e.g. from file manager)
    for path in sys.argv[1:]:
        if os.path.isdir(path):
            window.open_folder(os.path.abspath(path))
            break

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
