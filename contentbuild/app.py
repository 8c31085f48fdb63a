from __future__ import annotations

import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from contentbuild.app_logging import init_app_logging
from contentbuild.config import APP_NAME


def main(argv: Optional[List[str]] = None) -> int:
    init_app_logging(component="gui")

    from contentbuild.ui.main_window import MainWindow

    app = QApplication.instance() or QApplication([sys.argv[0]])
    app.setApplicationName(APP_NAME)

    window = MainWindow()
    window.show()

    args = list(argv or [])
    if args:
        window.open_content_folder(args[0])

    return int(app.exec())


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
