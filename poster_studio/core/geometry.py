"""画面几何计算.

纯函数：按画面比例计算居中裁剪区域，按旋转角度计算最终画布尺寸。
"""

from __future__ import annotations

from typing import NamedTuple

from poster_studio.models.adjustments import AspectRatio
from poster_studio.utils.constants import ROTATION_STEP


class CropRect(NamedTuple):
    """裁剪区域（源图像素坐标，可能为小数）."""

    x: float
    y: float
    width: float
    height: float

    def to_box(self) -> tuple[int, int, int, int]:
        """转换为 PIL crop 使用的整数 (left, top, right, bottom)."""
        left = round(self.x)
        top = round(self.y)
        return (left, top, left + round(self.width), top + round(self.height))


def crop_for(
    source_width: float,
    source_height: float,
    aspect_ratio: AspectRatio | str,
) -> CropRect:
    """计算指定比例下最大的居中裁剪区域.

    源图比目标比例更宽时保留全部高度、水平居中；否则保留全部宽度、垂直居中。

    Args:
        source_width: 源图宽度
        source_height: 源图高度
        aspect_ratio: 画面比例，original 不裁剪

    Returns:
        裁剪区域

    Example:
        >>> crop_for(1200, 800, "1:1")
        CropRect(x=200.0, y=0.0, width=800.0, height=800.0)
    """
    target = AspectRatio(aspect_ratio).ratio
    if target is None:
        return CropRect(0.0, 0.0, float(source_width), float(source_height))

    source_ratio = source_width / source_height
    if source_ratio > target:
        width = source_height * target
        return CropRect((source_width - width) / 2, 0.0, width, float(source_height))

    height = source_width / target
    return CropRect(0.0, (source_height - height) / 2, float(source_width), height)


def canvas_size_for(
    crop_width: float,
    crop_height: float,
    rotation: int,
) -> tuple[float, float]:
    """计算旋转后的画布尺寸.

    旋转 90°/270° 时宽高互换。
    """
    if rotation % 180 != 0:
        return (crop_height, crop_width)
    return (crop_width, crop_height)


def next_rotation(rotation: int) -> int:
    """顺时针旋转一步（+90°，对 360 取模）."""
    return (rotation + ROTATION_STEP) % 360
