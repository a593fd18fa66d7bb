"""
Application entry point and dark-theme stylesheet.

Usage:
    python -m meme_maker
    meme-crop-tool          (after pip install)
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from meme_maker.config import APP_NAME
from meme_maker.main_window import MainWindow

DARK_STYLESHEET = """
    QMainWindow { background: #111827; }
    QWidget { background: #1f2937; color: #ddd; font-size: 10pt; }
    QGroupBox { border: 1px solid #374151; border-radius: 6px; margin-top: 8px; padding-top: 14px; font-weight: bold; }
    QGroupBox::title { subcontrol-origin: margin; left: 8px; padding: 0 4px; }
    QPushButton { background: #4f46e5; border: none; border-radius: 6px; padding: 8px 12px; font-weight: bold; }
    QPushButton:hover { background: #4338ca; }
    QPushButton:pressed { background: #3730a3; }
    QPushButton:disabled { background: #4b5563; color: #9ca3af; }
    QLineEdit, QComboBox { background: #374151; border: 1px solid #4b5563; border-radius: 6px; padding: 6px; }
    QStatusBar { background: #111827; border-top: 1px solid #374151; }
"""


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setStyleSheet(DARK_STYLESHEET)

    window = MainWindow()
    window.show()

    try:
        sys.exit(app.exec())
    except (SystemExit, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
