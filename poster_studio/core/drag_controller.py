"""叠加元素拖拽控制器.

拖拽逻辑是一个纯状态机：``transition(state, event)`` 返回新状态和需要执行的副作用，
由 :class:`DragController` 将副作用作用到编辑会话上。

状态:
    Idle -> (PointerDown) -> Dragging -> (PointerUp / PointerLeave) -> Idle

副作用:
    - TakeSnapshot: 拖拽开始前保存撤销快照
    - MoveElement: 更新元素位置（百分比，限制在 [-10, 110]）

拖拽过程中只修改位置，不触发重新合成。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple, Union

from poster_studio.models.adjustments import ElementType
from poster_studio.utils.constants import POSITION_MAX, POSITION_MIN
from poster_studio.utils.helpers import clamp
from poster_studio.utils.logger import setup_logger

if TYPE_CHECKING:
    from poster_studio.core.editor_session import EditorSession

logger = setup_logger(__name__)


# ===================
# 状态
# ===================


@dataclass(frozen=True)
class Idle:
    """空闲."""


@dataclass(frozen=True)
class Dragging:
    """正在拖拽某个元素."""

    element_id: str
    element_type: ElementType


DragState = Union[Idle, Dragging]


# ===================
# 事件
# ===================


@dataclass(frozen=True)
class SurfaceRect:
    """预览区域在屏幕坐标中的矩形."""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class PointerDown:
    element_id: str
    element_type: ElementType


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float
    surface: SurfaceRect


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerLeave:
    pass


DragEvent = Union[PointerDown, PointerMove, PointerUp, PointerLeave]


# ===================
# 副作用
# ===================


@dataclass(frozen=True)
class TakeSnapshot:
    """保存撤销快照."""


@dataclass(frozen=True)
class MoveElement:
    """移动元素到百分比坐标."""

    element_id: str
    element_type: ElementType
    x: float
    y: float


DragEffect = Union[TakeSnapshot, MoveElement]


# ===================
# 状态转移
# ===================


def to_percent(x: float, y: float, surface: SurfaceRect) -> Tuple[float, float]:
    """将屏幕坐标换算为预览区域内的百分比坐标并限制范围.

    Args:
        x: 指针横坐标
        y: 指针纵坐标
        surface: 预览区域

    Returns:
        (x%, y%)，均在 [-10, 110] 之间
    """
    px = (x - surface.left) / surface.width * 100 if surface.width else 0.0
    py = (y - surface.top) / surface.height * 100 if surface.height else 0.0
    return (
        clamp(px, POSITION_MIN, POSITION_MAX),
        clamp(py, POSITION_MIN, POSITION_MAX),
    )


def transition(
    state: DragState, event: DragEvent
) -> Tuple[DragState, List[DragEffect]]:
    """拖拽状态转移.

    不适用于当前状态的事件被忽略：状态不变，没有副作用。

    Args:
        state: 当前状态
        event: 指针事件

    Returns:
        (新状态, 副作用列表)
    """
    if isinstance(state, Idle):
        if isinstance(event, PointerDown):
            return Dragging(event.element_id, event.element_type), [TakeSnapshot()]
        return state, []

    if isinstance(event, PointerMove):
        x, y = to_percent(event.x, event.y, event.surface)
        return state, [MoveElement(state.element_id, state.element_type, x, y)]

    if isinstance(event, (PointerUp, PointerLeave)):
        return Idle(), []

    return state, []


# ===================
# 控制器
# ===================


class DragController:
    """将拖拽状态机连接到编辑会话.

    同一时间只跟踪一个指针。

    Example:
        >>> controller = DragController(session)
        >>> controller.handle(PointerDown(text.id, ElementType.TEXT))
        >>> controller.handle(PointerMove(120, 80, SurfaceRect(0, 0, 400, 300)))
        >>> controller.handle(PointerUp())
    """

    def __init__(self, session: "EditorSession") -> None:
        self._session = session
        self._state: DragState = Idle()

    @property
    def state(self) -> DragState:
        """当前状态."""
        return self._state

    @property
    def is_dragging(self) -> bool:
        """是否正在拖拽."""
        return isinstance(self._state, Dragging)

    def handle(self, event: DragEvent) -> List[DragEffect]:
        """处理一个指针事件.

        Args:
            event: 指针事件

        Returns:
            已执行的副作用
        """
        next_state, effects = transition(self._state, event)

        for effect in effects:
            if isinstance(effect, TakeSnapshot):
                self._session.take_snapshot()
            elif isinstance(effect, MoveElement):
                self._session.move_element(
                    effect.element_id, effect.element_type, effect.x, effect.y
                )

        if next_state != self._state:
            logger.debug(f"拖拽状态: {self._state} -> {next_state}")
        self._state = next_state
        return effects
