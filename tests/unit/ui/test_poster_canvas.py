"""海报预览画布单元测试."""

from __future__ import annotations

import pytest
from PyQt6.QtCore import QPointF
from PyQt6.QtWidgets import QApplication

from poster_studio.core.editor_session import EditorSession
from poster_studio.models.adjustments import ElementType
from poster_studio.ui.poster_canvas import PosterCanvas


# ========================
# Fixtures
# ========================


@pytest.fixture(scope="module")
def app():
    """创建 QApplication 实例."""
    instance = QApplication.instance()
    if instance is None:
        instance = QApplication([])
    yield instance


@pytest.fixture
def session(sample_png: bytes) -> EditorSession:
    """已加载 400x300 源图的会话."""
    session = EditorSession()
    session.load_source(sample_png)
    return session


@pytest.fixture
def canvas(app, session: EditorSession):
    """与源图同尺寸的画布."""
    widget = PosterCanvas(session)
    widget.resize(400, 300)
    widget.refresh_preview()
    yield widget
    widget.close()


# ========================
# 预览测试
# ========================


class TestPreview:
    """测试底图预览."""

    def test_image_rect_fills_widget(self, canvas: PosterCanvas) -> None:
        """等比缩放后铺满同比例控件."""
        rect = canvas.image_rect()
        assert (rect.width(), rect.height()) == (400, 300)

    def test_image_rect_letterboxed(self, canvas: PosterCanvas) -> None:
        """比例不同时居中留边."""
        canvas.resize(800, 300)
        rect = canvas.image_rect()
        assert (rect.left(), rect.width()) == (200, 400)

    def test_empty_without_source(self, app) -> None:
        """没有源图时无显示区域."""
        widget = PosterCanvas(EditorSession())
        widget.refresh_preview()
        assert widget.image_rect().isEmpty()

    def test_preview_follows_rotation(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """旋转后预览比例随之变化."""
        session.rotate()
        canvas.refresh_preview()
        rect = canvas.image_rect()
        assert rect.height() > rect.width()

    def test_paint_does_not_fail(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """带叠加层绘制."""
        session.add_text("SALE")
        session.add_sticker("🔥")
        canvas.grab()


# ========================
# 命中与拖拽测试
# ========================


class TestDragging:
    """测试指针拖拽."""

    def test_hit_prefers_text(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """文字在贴纸之上."""
        session.add_sticker()
        text = session.add_text()
        assert canvas.element_at(QPointF(200, 150)) == (text.id, ElementType.TEXT)

    def test_miss(self, canvas: PosterCanvas, session: EditorSession) -> None:
        session.add_text()
        assert canvas.element_at(QPointF(5, 5)) is None
        assert canvas.press_at(QPointF(5, 5)) is False

    def test_drag_moves_text(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """拖拽更新百分比位置，撤销恢复原位."""
        text = session.add_text()
        moved = []
        canvas.element_moved.connect(lambda: moved.append(True))

        assert canvas.press_at(QPointF(200, 150))
        assert canvas.selected == (text.id, ElementType.TEXT)
        canvas.move_to(QPointF(300, 225))
        canvas.release()

        current = session.adjustments.get_text(text.id)
        assert (current.x, current.y) == (75, 75)
        assert moved == [True]

        session.undo()
        restored = session.adjustments.get_text(text.id)
        assert (restored.x, restored.y) == (50, 50)

    def test_drag_clamped(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """拖出画布时位置被限制."""
        sticker = session.add_sticker()
        canvas.press_at(QPointF(200, 150))
        canvas.move_to(QPointF(-400, 900))
        canvas.release()
        current = session.adjustments.get_sticker(sticker.id)
        assert (current.x, current.y) == (-10, 110)

    def test_move_without_press(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """未按下时移动无效果."""
        text = session.add_text()
        canvas.move_to(QPointF(300, 225))
        assert session.adjustments.get_text(text.id).x == 50

    def test_selection_signal(self, canvas: PosterCanvas, session: EditorSession) -> None:
        """命中时发出选中信号."""
        sticker = session.add_sticker()
        received = []
        canvas.element_selected.connect(lambda i, t: received.append((i, t)))
        canvas.press_at(QPointF(200, 150))
        canvas.release()
        assert received == [(sticker.id, ElementType.STICKER)]
