"""编辑调整数据模型.

描述一次编辑会话的全部可变状态：裁剪比例、旋转、亮度/对比度、景深模糊，
以及按层级排序的文字图层和贴纸图层。

Features:
    - 文字图层（预设样式 + 自定义覆盖参数）
    - 贴纸图层（位置、缩放、旋转）
    - 调整参数校验（旋转必须为 90 的倍数等）
    - 深拷贝快照，用于撤销
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from poster_studio.utils.constants import (
    DEFAULT_STICKER,
    DEFAULT_TEXT_CONTENT,
    MAX_BLUR,
    MAX_PERCENT,
    MIN_BLUR,
    MIN_PERCENT,
    NEUTRAL_PERCENT,
    POSITION_MAX,
    POSITION_MIN,
    ROTATION_STEP,
)
from poster_studio.utils.helpers import generate_short_id, hex_to_rgba


# ===================
# 枚举定义
# ===================


class AspectRatio(str, Enum):
    """画面比例."""

    ORIGINAL = "original"
    SQUARE = "1:1"
    WIDESCREEN = "16:9"
    PORTRAIT_WIDE = "9:16"
    STANDARD = "4:3"
    PORTRAIT = "3:4"

    @property
    def ratio(self) -> Optional[float]:
        """宽高比数值，original 返回 None."""
        if self is AspectRatio.ORIGINAL:
            return None
        width, height = self.value.split(":")
        return int(width) / int(height)


class TextStyle(str, Enum):
    """文字样式."""

    NEON = "neon"  # 赛博霓虹
    ELEGANT = "elegant"  # 雅致衬线
    BOLD = "bold"  # 硬核标题
    TRADITIONAL = "traditional"  # 古典纵排
    BRUSH = "brush"  # 艺术泼墨
    CUSTOM = "custom"  # 完全自定义


# 文字样式中文名称
TEXT_STYLE_LABELS: dict[TextStyle, str] = {
    TextStyle.NEON: "赛博霓虹",
    TextStyle.ELEGANT: "雅致衬线",
    TextStyle.BOLD: "硬核标题",
    TextStyle.TRADITIONAL: "古典纵排",
    TextStyle.BRUSH: "艺术泼墨",
    TextStyle.CUSTOM: "自定义",
}


class ElementType(str, Enum):
    """可拖拽的叠加元素类型."""

    TEXT = "text"
    STICKER = "sticker"


def _validate_color(value: Optional[str]) -> Optional[str]:
    if value is not None:
        hex_to_rgba(value)
    return value


# ===================
# 叠加图层
# ===================


class PosterText(BaseModel):
    """海报文字图层.

    位置为画布宽高的百分比，允许拖出边缘到 [-10, 110]。
    非 custom 样式始终使用预设排版参数，覆盖字段仅在 custom 样式下生效。

    Attributes:
        id: 唯一 ID
        content: 文字内容
        style: 样式标签
        x: 水平位置（百分比）
        y: 垂直位置（百分比）
        font_size: 字号缩放系数
        font_family: 自定义字体
        color: 自定义填充颜色
        shadow_color: 自定义阴影/描边颜色
        shadow_blur: 自定义阴影模糊半径
        glow_color: 自定义发光颜色
        glow_size: 自定义发光大小
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_short_id, description="图层ID")
    content: str = Field(default=DEFAULT_TEXT_CONTENT, description="文字内容")
    style: TextStyle = Field(default=TextStyle.ELEGANT, description="样式")
    x: float = Field(default=50.0, ge=POSITION_MIN, le=POSITION_MAX)
    y: float = Field(default=50.0, ge=POSITION_MIN, le=POSITION_MAX)
    font_size: float = Field(default=1.0, gt=0, le=10, description="字号缩放")

    # 自定义覆盖（仅 custom 样式）
    font_family: Optional[str] = Field(default=None, description="字体")
    color: Optional[str] = Field(default=None, description="填充颜色")
    shadow_color: Optional[str] = Field(default=None, description="阴影颜色")
    shadow_blur: Optional[float] = Field(default=None, ge=0, description="阴影模糊")
    glow_color: Optional[str] = Field(default=None, description="发光颜色")
    glow_size: Optional[float] = Field(default=None, ge=0, description="发光大小")

    @field_validator("color", "shadow_color", "glow_color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        """验证颜色字符串."""
        return _validate_color(v)


class Sticker(BaseModel):
    """贴纸图层.

    Attributes:
        id: 唯一 ID
        content: Emoji 字符
        x: 水平位置（百分比）
        y: 垂直位置（百分比）
        scale: 缩放
        rotation: 旋转角度（度，连续值）
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_short_id, description="贴纸ID")
    content: str = Field(default=DEFAULT_STICKER, min_length=1, description="Emoji")
    x: float = Field(default=50.0, ge=POSITION_MIN, le=POSITION_MAX)
    y: float = Field(default=50.0, ge=POSITION_MIN, le=POSITION_MAX)
    scale: float = Field(default=1.0, gt=0, le=10, description="缩放")
    rotation: float = Field(default=0.0, ge=0, le=360, description="旋转角度")


# ===================
# 调整参数
# ===================


class Adjustments(BaseModel):
    """一次编辑会话的调整参数.

    Attributes:
        brightness: 亮度百分比，100 为原始
        contrast: 对比度百分比，100 为原始
        rotation: 旋转角度，0/90/180/270
        blur: 景深模糊强度，0 表示关闭
        aspect_ratio: 画面比例
        texts: 文字图层（列表顺序即层级）
        stickers: 贴纸图层（列表顺序即层级）

    Example:
        >>> adj = Adjustments(rotation=90)
        >>> adj.snapshot() == adj
        True
    """

    model_config = ConfigDict(validate_assignment=True)

    brightness: float = Field(default=NEUTRAL_PERCENT, ge=MIN_PERCENT, le=MAX_PERCENT)
    contrast: float = Field(default=NEUTRAL_PERCENT, ge=MIN_PERCENT, le=MAX_PERCENT)
    rotation: int = Field(default=0, ge=0, lt=360)
    blur: float = Field(default=0, ge=MIN_BLUR, le=MAX_BLUR)
    aspect_ratio: AspectRatio = Field(default=AspectRatio.ORIGINAL)
    texts: list[PosterText] = Field(default_factory=list)
    stickers: list[Sticker] = Field(default_factory=list)

    @field_validator("rotation")
    @classmethod
    def validate_rotation(cls, v: int) -> int:
        """旋转必须是 90 的倍数."""
        if v % ROTATION_STEP != 0:
            raise ValueError(f"旋转角度必须是 {ROTATION_STEP} 的倍数: {v}")
        return v

    def snapshot(self) -> "Adjustments":
        """深拷贝当前状态."""
        return self.model_copy(deep=True)

    def get_text(self, text_id: str) -> Optional[PosterText]:
        """按 ID 获取文字图层."""
        return next((t for t in self.texts if t.id == text_id), None)

    def get_sticker(self, sticker_id: str) -> Optional[Sticker]:
        """按 ID 获取贴纸."""
        return next((s for s in self.stickers if s.id == sticker_id), None)

    def get_element(
        self, element_id: str, element_type: ElementType
    ) -> Optional[PosterText | Sticker]:
        """按类型和 ID 获取叠加元素."""
        if element_type == ElementType.TEXT:
            return self.get_text(element_id)
        return self.get_sticker(element_id)
