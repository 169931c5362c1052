"""异步任务工作线程.

在独立的 Qt 线程中为每个任务创建新的事件循环，运行 AI 分析与风格转换等协程，
结果通过信号回到界面线程。
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class AsyncTaskThread(QThread):
    """运行单个协程的工作线程.

    Signals:
        succeeded: 协程返回值
        failed: 协程抛出的异常

    Example:
        >>> thread = AsyncTaskThread(lambda: service.transform())
        >>> thread.succeeded.connect(on_done)
        >>> thread.failed.connect(on_error)
        >>> thread.start()
    """

    succeeded = pyqtSignal(object)
    failed = pyqtSignal(object)

    def __init__(
        self,
        coroutine_factory: Callable[[], Awaitable[Any]],
        name: str = "",
        parent: Optional[QObject] = None,
    ) -> None:
        """初始化工作线程.

        Args:
            coroutine_factory: 在工作线程中调用以创建协程的函数
            name: 任务名称（用于日志）
            parent: 父对象
        """
        super().__init__(parent)
        self._factory = coroutine_factory
        self._name = name or "async-task"

    def run(self) -> None:
        """在新的事件循环中运行协程."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            result = loop.run_until_complete(self._factory())
        except Exception as e:
            logger.warning(f"后台任务失败: {self._name}, {e}")
            self.failed.emit(e)
        else:
            self.succeeded.emit(result)
        finally:
            loop.close()
            asyncio.set_event_loop(None)
            logger.debug(f"后台任务结束: {self._name}")
