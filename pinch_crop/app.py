"""
Application entry point and dark-theme stylesheet.

Usage:
    python -m pinch_crop [IMAGE]
    pinch-crop [IMAGE]          (after pip install)

Set ``PINCH_CROP_LOG=DEBUG`` to see viewport and crop decisions.
"""

import logging
import os
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from pinch_crop.main_window import MainWindow

DARK_STYLESHEET = """
    QMainWindow { background: #2b2b2b; }
    QWidget { background: #2b2b2b; color: #ddd; font-size: 10pt; }
    QPushButton { border: none; border-radius: 18px; padding: 10px 30px; color: white; }
    QPushButton#cancelButton { background: rgba(255, 0, 0, 204); }
    QPushButton#doneButton { background: #1e6fff; }
    QPushButton:disabled { background: #3a3a3a; color: #666; }
    QToolBar { background: #333; border-bottom: 1px solid #444; spacing: 4px; padding: 4px; }
    QStatusBar { background: #333; border-top: 1px solid #444; }
"""


def configure_logging():
    level = os.environ.get("PINCH_CROP_LOG", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    configure_logging()
    app = QApplication(sys.argv)
    app.setStyleSheet(DARK_STYLESHEET)

    window = MainWindow()
    window.show()
    if len(sys.argv) > 1:
        window.open_image(Path(sys.argv[1]))

    try:
        sys.exit(app.exec())
    except (SystemExit, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
