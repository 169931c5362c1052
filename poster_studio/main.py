"""设计风格迁移 AI - 应用入口."""

from __future__ import annotations

import sys


def main() -> int:
    """应用主入口函数.

    Returns:
        退出码，0 表示正常退出
    """
    from PyQt6.QtWidgets import QApplication

    from poster_studio.app import Application
    from poster_studio.utils.constants import APP_NAME, APP_VERSION
    from poster_studio.utils.exceptions import AppException
    from poster_studio.utils.logger import setup_logger

    logger = setup_logger(__name__)
    logger.info(f"启动 {APP_NAME}")

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName(APP_NAME)
    qt_app.setApplicationVersion(APP_VERSION)

    app = Application()
    try:
        app.initialize()
        app.show_main_window()
        exit_code = qt_app.exec()
    except AppException as e:
        logger.error(f"应用启动失败: {e}")
        return 1
    finally:
        app.cleanup()

    logger.info(f"应用正常退出，退出码: {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
