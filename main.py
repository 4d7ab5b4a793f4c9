import sys
import os
import logging
import platform
from PySide6.QtWidgets import QApplication
from ui.main_window import MainWindow
from core.paths import get_resource_path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging():
    level_name = os.environ.get("SQUARECROP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _load_platform_stylesheet() -> str:
    if platform.system() == "Darwin":
        style_path = get_resource_path("styles/macos.qss")
    else:
        style_path = get_resource_path("styles/default.qss")

    if not os.path.exists(style_path):
        return ""

    with open(style_path, "r", encoding="utf-8") as f:
        return f.read()


def main():
    configure_logging()
    app = QApplication(sys.argv)
    stylesheet = _load_platform_stylesheet()
    if stylesheet:
        app.setStyleSheet(stylesheet)
    window = MainWindow()
    if len(sys.argv) > 1:
        window.load_source(sys.argv[1])
    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
