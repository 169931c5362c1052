"""编辑会话.

持有源图与当前调整参数，提供所有编辑操作。每个可撤销的操作在修改前
向撤销栈保存一份快照；滑块拖动只在开始交互时保存一次。

合成只在显式调用 :meth:`EditorSession.apply` 时发生。
"""

from __future__ import annotations

from typing import Any, Optional

from poster_studio.core.compositor import Compositor
from poster_studio.core.geometry import next_rotation
from poster_studio.core.undo_stack import UndoStack
from poster_studio.models.adjustments import (
    Adjustments,
    AspectRatio,
    ElementType,
    PosterText,
    Sticker,
    TextStyle,
)
from poster_studio.utils.constants import (
    DEFAULT_STICKER,
    DEFAULT_TEXT_CONTENT,
    POSITION_MAX,
    POSITION_MIN,
)
from poster_studio.utils.exceptions import UserInputError
from poster_studio.utils.helpers import clamp
from poster_studio.utils.image_utils import ImageSource, load_source_image
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 只有 custom 样式会读取的覆盖字段
TEXT_OVERRIDE_FIELDS = (
    "font_family",
    "color",
    "shadow_color",
    "shadow_blur",
    "glow_color",
    "glow_size",
)


class EditorSession:
    """单张海报的编辑会话.

    Attributes:
        adjustments: 当前调整参数
        source: 源图（未应用任何调整）

    Example:
        >>> session = EditorSession()
        >>> session.load_source(image_bytes)
        >>> text = session.add_text()
        >>> session.update_text(text.id, style=TextStyle.BOLD)
        >>> png = session.apply(Compositor())
    """

    def __init__(self, undo_stack: Optional[UndoStack] = None) -> None:
        self.undo_stack = undo_stack if undo_stack is not None else UndoStack()
        self.adjustments = Adjustments()
        self.source: Optional[ImageSource] = None

    # ========================
    # 源图
    # ========================

    @property
    def has_source(self) -> bool:
        """是否已加载源图."""
        return self.source is not None

    def load_source(self, source: ImageSource) -> None:
        """加载新的源图并重置调整参数.

        Raises:
            ImageLoadError: 图片无法解码
        """
        image = load_source_image(source)
        self.source = image
        self.adjustments = Adjustments()
        self.undo_stack.clear()
        logger.info(f"已加载源图: {image.size}")

    def reset(self) -> None:
        """清空源图与全部编辑."""
        self.source = None
        self.adjustments = Adjustments()
        self.undo_stack.clear()
        logger.debug("编辑会话已重置")

    # ========================
    # 撤销
    # ========================

    def take_snapshot(self) -> None:
        """保存当前状态到撤销栈."""
        self.undo_stack.snapshot(self.adjustments)

    @property
    def can_undo(self) -> bool:
        """是否可以撤销."""
        return self.undo_stack.can_undo

    def undo(self) -> bool:
        """恢复到上一次快照.

        Returns:
            是否成功撤销
        """
        previous = self.undo_stack.undo()
        if previous is None:
            return False
        self.adjustments = previous
        return True

    # ========================
    # 文字图层
    # ========================

    def add_text(
        self,
        content: str = DEFAULT_TEXT_CONTENT,
        style: TextStyle = TextStyle.ELEGANT,
    ) -> PosterText:
        """在画布中央添加文字图层."""
        self.take_snapshot()
        text = PosterText(content=content, style=style)
        self.adjustments.texts = [*self.adjustments.texts, text]
        return text

    def update_text(self, text_id: str, **updates: Any) -> PosterText:
        """修改文字图层的内容、样式或字号等属性.

        Raises:
            UserInputError: 图层不存在
            ValidationError: 属性值无效
        """
        text = self._require_text(text_id)
        updated = PosterText.model_validate({**text.model_dump(), **updates})
        self.take_snapshot()
        self._replace_text(updated)
        return updated

    def set_text_override(self, text_id: str, **overrides: Any) -> PosterText:
        """设置自定义排版参数，样式随之切换为 custom.

        Raises:
            UserInputError: 图层不存在或字段不是覆盖字段
        """
        unknown = set(overrides) - set(TEXT_OVERRIDE_FIELDS)
        if unknown:
            raise UserInputError(f"不支持的自定义字段: {', '.join(sorted(unknown))}")
        return self.update_text(text_id, style=TextStyle.CUSTOM, **overrides)

    def remove_text(self, text_id: str) -> None:
        """删除文字图层."""
        self._require_text(text_id)
        self.take_snapshot()
        self.adjustments.texts = [t for t in self.adjustments.texts if t.id != text_id]

    # ========================
    # 贴纸
    # ========================

    def add_sticker(self, content: str = DEFAULT_STICKER) -> Sticker:
        """在画布中央添加贴纸."""
        self.take_snapshot()
        sticker = Sticker(content=content)
        self.adjustments.stickers = [*self.adjustments.stickers, sticker]
        return sticker

    def update_sticker(self, sticker_id: str, **updates: Any) -> Sticker:
        """修改贴纸的缩放、旋转或内容.

        Raises:
            UserInputError: 贴纸不存在
        """
        sticker = self._require_sticker(sticker_id)
        updated = Sticker.model_validate({**sticker.model_dump(), **updates})
        self.take_snapshot()
        self.adjustments.stickers = [
            updated if s.id == sticker_id else s for s in self.adjustments.stickers
        ]
        return updated

    def remove_sticker(self, sticker_id: str) -> None:
        """删除贴纸."""
        self._require_sticker(sticker_id)
        self.take_snapshot()
        self.adjustments.stickers = [
            s for s in self.adjustments.stickers if s.id != sticker_id
        ]

    # ========================
    # 层级
    # ========================

    def bring_to_front(self, element_id: str, element_type: ElementType) -> None:
        """移到同类元素的最上层."""
        self._reorder(element_id, element_type, to_front=True)

    def send_to_back(self, element_id: str, element_type: ElementType) -> None:
        """移到同类元素的最下层."""
        self._reorder(element_id, element_type, to_front=False)

    def _reorder(self, element_id: str, element_type: ElementType, to_front: bool) -> None:
        field = "texts" if element_type == ElementType.TEXT else "stickers"
        elements = list(getattr(self.adjustments, field))
        target = next((e for e in elements if e.id == element_id), None)
        if target is None:
            raise UserInputError(f"元素不存在: {element_id}")
        if elements[-1 if to_front else 0] is target:
            return

        self.take_snapshot()
        elements.remove(target)
        if to_front:
            elements.append(target)
        else:
            elements.insert(0, target)
        setattr(self.adjustments, field, elements)

    # ========================
    # 画面
    # ========================

    def rotate(self) -> int:
        """顺时针旋转 90°.

        Returns:
            新的旋转角度
        """
        self.take_snapshot()
        self.adjustments.rotation = next_rotation(self.adjustments.rotation)
        return self.adjustments.rotation

    def set_aspect_ratio(self, aspect_ratio: AspectRatio | str) -> None:
        """设置裁剪比例."""
        self.take_snapshot()
        self.adjustments.aspect_ratio = AspectRatio(aspect_ratio)

    def begin_slider_interaction(self) -> None:
        """滑块开始拖动前保存快照，拖动过程中的连续修改共用这一次快照."""
        self.take_snapshot()

    def set_brightness(self, value: float) -> None:
        self.adjustments.brightness = value

    def set_contrast(self, value: float) -> None:
        self.adjustments.contrast = value

    def set_blur(self, value: float) -> None:
        self.adjustments.blur = value

    # ========================
    # 拖拽
    # ========================

    def move_element(
        self,
        element_id: str,
        element_type: ElementType,
        x: float,
        y: float,
    ) -> None:
        """更新元素位置（不保存快照，由拖拽开始时统一保存）.

        不存在的元素被忽略。
        """
        element = self.adjustments.get_element(element_id, element_type)
        if element is None:
            logger.debug(f"拖拽目标不存在: {element_type.value}/{element_id}")
            return
        element.x = clamp(x, POSITION_MIN, POSITION_MAX)
        element.y = clamp(y, POSITION_MIN, POSITION_MAX)

    # ========================
    # 合成
    # ========================

    def apply(self, compositor: Compositor) -> bytes:
        """将当前调整合成为扁平 PNG.

        Raises:
            UserInputError: 尚未加载源图
            ImageLoadError: 源图无法解码
        """
        if self.source is None:
            raise UserInputError("请先上传一张图片")
        return compositor.render(self.source, self.adjustments)

    # ========================
    # 内部方法
    # ========================

    def _require_text(self, text_id: str) -> PosterText:
        text = self.adjustments.get_text(text_id)
        if text is None:
            raise UserInputError(f"文字图层不存在: {text_id}")
        return text

    def _require_sticker(self, sticker_id: str) -> Sticker:
        sticker = self.adjustments.get_sticker(sticker_id)
        if sticker is None:
            raise UserInputError(f"贴纸不存在: {sticker_id}")
        return sticker

    def _replace_text(self, updated: PosterText) -> None:
        self.adjustments.texts = [
            updated if t.id == updated.id else t for t in self.adjustments.texts
        ]
