"""核心业务逻辑模块."""

from poster_studio.core.compositor import Compositor, color_lut, radial_alpha_mask
from poster_studio.core.drag_controller import (
    DragController,
    Dragging,
    Idle,
    MoveElement,
    PointerDown,
    PointerLeave,
    PointerMove,
    PointerUp,
    SurfaceRect,
    TakeSnapshot,
    transition,
)
from poster_studio.core.editor_session import EditorSession
from poster_studio.core.geometry import CropRect, canvas_size_for, crop_for, next_rotation
from poster_studio.core.history_cache import HistoryCache
from poster_studio.core.undo_stack import UndoStack

__all__ = [
    # 几何
    "CropRect",
    "crop_for",
    "canvas_size_for",
    "next_rotation",
    # 合成
    "Compositor",
    "color_lut",
    "radial_alpha_mask",
    # 拖拽
    "DragController",
    "Idle",
    "Dragging",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "PointerLeave",
    "SurfaceRect",
    "TakeSnapshot",
    "MoveElement",
    "transition",
    # 编辑
    "EditorSession",
    "UndoStack",
    "HistoryCache",
]
