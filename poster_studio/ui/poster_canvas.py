"""海报预览画布.

显示应用了裁剪、旋转、调色与景深的底图，并用 QPainter 实时绘制文字和贴纸
的位置预览。鼠标事件交给拖拽控制器处理；拖拽时只重绘叠加层，不重新合成底图。
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QImage, QMouseEvent, QPainter, QPaintEvent, QPen, QPixmap
from PyQt6.QtWidgets import QWidget

from poster_studio.core.compositor import Compositor
from poster_studio.core.drag_controller import (
    DragController,
    PointerDown,
    PointerLeave,
    PointerMove,
    PointerUp,
    SurfaceRect,
)
from poster_studio.core.editor_session import EditorSession
from poster_studio.models.adjustments import ElementType
from poster_studio.utils.constants import STICKER_SIZE_DIVISOR, TEXT_SIZE_DIVISOR
from poster_studio.utils.helpers import hex_to_rgba
from poster_studio.utils.image_utils import image_to_bytes
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 命中检测半径（占画布宽度的百分比）
HIT_RADIUS_PERCENT = 8.0

BACKGROUND_COLOR = QColor(15, 23, 42)
SELECTION_COLOR = QColor(59, 130, 246)


class PosterCanvas(QWidget):
    """海报预览画布.

    Signals:
        element_selected: 选中元素 (element_id, element_type)
        element_moved: 拖拽结束，元素位置已更新
    """

    element_selected = pyqtSignal(str, object)
    element_moved = pyqtSignal()

    def __init__(
        self,
        session: EditorSession,
        compositor: Optional[Compositor] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._compositor = compositor or Compositor()
        self._controller = DragController(session)
        self._pixmap: Optional[QPixmap] = None
        self._selected: Optional[tuple[str, ElementType]] = None

        self.setMouseTracking(True)
        self.setMinimumSize(320, 240)

    @property
    def controller(self) -> DragController:
        """拖拽控制器."""
        return self._controller

    @property
    def selected(self) -> Optional[tuple[str, ElementType]]:
        """当前选中的元素."""
        return self._selected

    # ========================
    # 底图
    # ========================

    def refresh_preview(self) -> None:
        """重新合成底图预览（不含文字和贴纸）."""
        if self._session.source is None:
            self._pixmap = None
            self.update()
            return

        base_only = self._session.adjustments.model_copy(
            update={"texts": [], "stickers": []}
        )
        image = self._compositor.render_image(self._session.source, base_only)
        self._pixmap = QPixmap.fromImage(QImage.fromData(image_to_bytes(image)))
        self.update()

    def image_rect(self) -> QRectF:
        """底图在控件中的显示区域（等比缩放居中）."""
        if self._pixmap is None or self._pixmap.isNull():
            return QRectF()

        scale = min(
            self.width() / self._pixmap.width(),
            self.height() / self._pixmap.height(),
        )
        w = self._pixmap.width() * scale
        h = self._pixmap.height() * scale
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def _surface(self) -> SurfaceRect:
        rect = self.image_rect()
        return SurfaceRect(rect.left(), rect.top(), rect.width(), rect.height())

    # ========================
    # 命中检测
    # ========================

    def element_at(self, pos: QPointF) -> Optional[tuple[str, ElementType]]:
        """查找指针位置下最上层的元素（文字在贴纸之上）."""
        rect = self.image_rect()
        if rect.isEmpty():
            return None

        px = (pos.x() - rect.left()) / rect.width() * 100
        py = (pos.y() - rect.top()) / rect.height() * 100
        # 纵向半径按画布宽高比换算，保证命中区域在屏幕上近似为圆形
        ry = HIT_RADIUS_PERCENT * rect.width() / rect.height()

        adjustments = self._session.adjustments
        candidates = [
            *((t.id, ElementType.TEXT, t.x, t.y) for t in reversed(adjustments.texts)),
            *((s.id, ElementType.STICKER, s.x, s.y) for s in reversed(adjustments.stickers)),
        ]
        for element_id, element_type, x, y in candidates:
            if ((px - x) / HIT_RADIUS_PERCENT) ** 2 + ((py - y) / ry) ** 2 <= 1:
                return element_id, element_type
        return None

    # ========================
    # 指针操作
    # ========================

    def press_at(self, pos: QPointF) -> bool:
        """在指定位置按下指针，命中元素时开始拖拽.

        Returns:
            是否命中元素
        """
        hit = self.element_at(pos)
        if hit is None:
            return False

        self._selected = hit
        self._controller.handle(PointerDown(*hit))
        self.element_selected.emit(hit[0], hit[1])
        self.update()
        return True

    def move_to(self, pos: QPointF) -> None:
        """指针移动."""
        if not self._controller.is_dragging:
            return
        self._controller.handle(PointerMove(pos.x(), pos.y(), self._surface()))
        self.update()

    def release(self) -> None:
        """指针抬起."""
        was_dragging = self._controller.is_dragging
        self._controller.handle(PointerUp())
        if was_dragging:
            self.element_moved.emit()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton and self.press_at(event.position()):
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        self.move_to(event.position())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.release()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event) -> None:
        was_dragging = self._controller.is_dragging
        self._controller.handle(PointerLeave())
        if was_dragging:
            self.element_moved.emit()
        super().leaveEvent(event)

    # ========================
    # 绘制
    # ========================

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)

        rect = self.image_rect()
        if self._pixmap is None or rect.isEmpty():
            painter.setPen(QColor(148, 163, 184))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "上传一张图片开始创作")
            painter.end()
            return

        painter.drawPixmap(rect, self._pixmap, QRectF(self._pixmap.rect()))
        self._paint_overlays(painter, rect)
        painter.end()

    def _paint_overlays(self, painter: QPainter, rect: QRectF) -> None:
        adjustments = self._session.adjustments

        for sticker in adjustments.stickers:
            size = rect.width() / STICKER_SIZE_DIVISOR * sticker.scale
            center = self._to_widget(rect, sticker.x, sticker.y)
            painter.save()
            painter.translate(center)
            painter.rotate(sticker.rotation)
            font = QFont()
            font.setPixelSize(max(1, round(size)))
            painter.setFont(font)
            painter.drawText(
                QRectF(-size, -size, size * 2, size * 2),
                Qt.AlignmentFlag.AlignCenter,
                sticker.content,
            )
            painter.restore()
            self._paint_selection(painter, sticker.id, ElementType.STICKER, center, size)

        for text in adjustments.texts:
            size = rect.width() / TEXT_SIZE_DIVISOR * text.font_size
            center = self._to_widget(rect, text.x, text.y)
            font = QFont()
            font.setPixelSize(max(1, round(size)))
            painter.setFont(font)
            painter.setPen(QColor(*hex_to_rgba(text.color)) if text.color else QColor("white"))
            box = QRectF(center.x() - rect.width(), center.y() - size, rect.width() * 2, size * 2)
            painter.drawText(box, Qt.AlignmentFlag.AlignCenter, text.content)
            self._paint_selection(painter, text.id, ElementType.TEXT, center, size)

    def _paint_selection(
        self,
        painter: QPainter,
        element_id: str,
        element_type: ElementType,
        center: QPointF,
        size: float,
    ) -> None:
        if self._selected != (element_id, element_type):
            return
        painter.save()
        painter.setPen(QPen(SELECTION_COLOR, 1.5, Qt.PenStyle.DashLine))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawEllipse(center, size * 0.75, size * 0.75)
        painter.restore()

    @staticmethod
    def _to_widget(rect: QRectF, x: float, y: float) -> QPointF:
        return QPointF(rect.left() + rect.width() * x / 100, rect.top() + rect.height() * y / 100)
