"""撤销快照栈.

在每次可撤销的编辑之前保存 Adjustments 的深拷贝，撤销时原样弹出。

Features:
    - 快照入栈（深拷贝）
    - 撤销出栈，空栈时返回 None
    - 不支持重做，不限制深度
"""

from __future__ import annotations

from typing import List, Optional

from poster_studio.models.adjustments import Adjustments
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class UndoStack:
    """调整参数快照栈.

    Example:
        >>> stack = UndoStack()
        >>> stack.snapshot(adjustments)
        >>> previous = stack.undo()
    """

    def __init__(self) -> None:
        self._snapshots: List[Adjustments] = []

    @property
    def can_undo(self) -> bool:
        """是否可以撤销."""
        return len(self._snapshots) > 0

    @property
    def depth(self) -> int:
        """栈深度."""
        return len(self._snapshots)

    def snapshot(self, adjustments: Adjustments) -> None:
        """保存当前状态的深拷贝.

        Args:
            adjustments: 即将被修改的调整参数
        """
        self._snapshots.append(adjustments.snapshot())
        logger.debug(f"快照入栈，当前深度: {self.depth}")

    def undo(self) -> Optional[Adjustments]:
        """弹出最近一次快照.

        Returns:
            上一个状态，栈为空时返回 None
        """
        if not self._snapshots:
            return None
        previous = self._snapshots.pop()
        logger.debug(f"撤销，剩余深度: {self.depth}")
        return previous

    def clear(self) -> None:
        """清空快照栈."""
        self._snapshots.clear()
