"""海报合成器.

将源图片与编辑调整参数合成为一张扁平的 PNG 图片。

合成顺序固定（从后到前）:
    1. 计算裁剪区域与画布尺寸
    2. 底图：裁剪、亮度/对比度、旋转
    3. 景深：模糊背景 + 径向遮罩的清晰前景（blur > 0 时）
    4. 贴纸：按列表顺序逐个平移 → 旋转 → 缩放
    5. 文字：按列表顺序逐个绘制（发光 → 描边/阴影 → 填充）
    6. 编码为无损 PNG

相同输入多次合成得到逐像素一致的结果。
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter

from poster_studio.core.geometry import canvas_size_for, crop_for
from poster_studio.core.typography import (
    PassKind,
    TextPass,
    has_chinese_characters,
    find_emoji_font,
    find_font,
    layout_text,
    plan_text_passes,
    resolve_typography,
)
from poster_studio.models.adjustments import Adjustments, AspectRatio, PosterText, Sticker
from poster_studio.utils.constants import (
    DEFAULT_FOCUS_INNER_RADIUS,
    DEFAULT_FOCUS_OUTER_RADIUS,
    NEUTRAL_PERCENT,
    STICKER_SIZE_DIVISOR,
)
from poster_studio.utils.image_utils import ImageSource, image_to_bytes, load_source_image
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 顺时针旋转角度 → PIL 转置操作
_ROTATE_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


# ===================
# 纯函数
# ===================


def color_lut(brightness: float, contrast: float) -> list[int]:
    """亮度/对比度查找表.

    与 CSS ``brightness(b%) contrast(c%)`` 等价：先按亮度线性缩放，
    再以 50% 灰为中心按对比度缩放。100% 为不变。

    Args:
        brightness: 亮度百分比
        contrast: 对比度百分比

    Returns:
        256 项查找表
    """
    b = brightness / NEUTRAL_PERCENT
    c = contrast / NEUTRAL_PERCENT
    table = []
    for i in range(256):
        v = (i * b - 127.5) * c + 127.5
        table.append(max(0, min(255, int(round(v)))))
    return table


def radial_alpha_mask(
    width: int,
    height: int,
    inner_radius: float = DEFAULT_FOCUS_INNER_RADIUS,
    outer_radius: float = DEFAULT_FOCUS_OUTER_RADIUS,
) -> Image.Image:
    """生成径向透明度遮罩.

    以画布中心为圆心：内半径（占宽度比例）以内完全不透明，外半径以外完全透明，
    两者之间线性过渡。

    Args:
        width: 遮罩宽度
        height: 遮罩高度
        inner_radius: 内半径占宽度的比例
        outer_radius: 外半径占宽度的比例

    Returns:
        "L" 模式遮罩

    Raises:
        ValueError: 外半径不大于内半径
    """
    if outer_radius <= inner_radius:
        raise ValueError(f"外半径 {outer_radius} 必须大于内半径 {inner_radius}")

    inner = inner_radius * width
    outer = outer_radius * width
    ys, xs = np.mgrid[0:height, 0:width]
    distance = np.hypot(xs + 0.5 - width / 2, ys + 0.5 - height / 2)
    alpha = np.clip((outer - distance) / (outer - inner), 0.0, 1.0)
    return Image.fromarray(np.rint(alpha * 255).astype(np.uint8))


# ===================
# 合成器
# ===================


class Compositor:
    """海报合成器.

    Attributes:
        focus_inner_radius: 景深清晰区半径（占宽度比例）
        focus_outer_radius: 景深过渡区外半径（占宽度比例）

    Example:
        >>> compositor = Compositor()
        >>> png = compositor.render(image_bytes, Adjustments(rotation=90))
    """

    def __init__(
        self,
        focus_inner_radius: float = DEFAULT_FOCUS_INNER_RADIUS,
        focus_outer_radius: float = DEFAULT_FOCUS_OUTER_RADIUS,
    ) -> None:
        if focus_outer_radius <= focus_inner_radius:
            raise ValueError("focus_outer_radius 必须大于 focus_inner_radius")
        self.focus_inner_radius = focus_inner_radius
        self.focus_outer_radius = focus_outer_radius

    def render(self, source: ImageSource, adjustments: Adjustments) -> bytes:
        """合成并编码为 PNG.

        Args:
            source: 源图片
            adjustments: 调整参数

        Returns:
            PNG 字节数据

        Raises:
            ImageLoadError: 源图片无法解码
        """
        return image_to_bytes(self.render_image(source, adjustments), "PNG")

    def render_image(self, source: ImageSource, adjustments: Adjustments) -> Image.Image:
        """合成为 PIL 图片.

        Raises:
            ImageLoadError: 源图片无法解码
        """
        image = load_source_image(source)

        base = self._draw_base(image, adjustments)
        if adjustments.blur > 0:
            canvas = self._depth_of_field(base, adjustments.blur)
        else:
            canvas = base

        for sticker in adjustments.stickers:
            canvas = self._draw_sticker(canvas, sticker)

        for text in adjustments.texts:
            canvas = self._draw_text(canvas, text)

        logger.debug(
            f"合成完成: 源图={image.size}, 画布={canvas.size}, "
            f"文字={len(adjustments.texts)}, 贴纸={len(adjustments.stickers)}"
        )
        return canvas

    # ========================
    # 底图
    # ========================

    def _draw_base(self, image: Image.Image, adjustments: Adjustments) -> Image.Image:
        """裁剪、调色并旋转底图."""
        if adjustments.aspect_ratio != AspectRatio.ORIGINAL:
            crop = crop_for(image.width, image.height, adjustments.aspect_ratio)
            image = image.crop(crop.to_box())

        if adjustments.brightness != NEUTRAL_PERCENT or adjustments.contrast != NEUTRAL_PERCENT:
            lut = color_lut(adjustments.brightness, adjustments.contrast)
            # RGB 三通道查表，Alpha 通道不变
            image = image.point(lut * 3 + list(range(256)))

        canvas_width, canvas_height = canvas_size_for(
            image.width, image.height, adjustments.rotation
        )

        transpose = _ROTATE_TRANSPOSE.get(adjustments.rotation)
        if transpose is not None:
            image = image.transpose(transpose)

        # 以画布中心为原点放置旋转后的底图
        base = Image.new("RGBA", (int(canvas_width), int(canvas_height)), (0, 0, 0, 0))
        base.paste(
            image,
            (round((base.width - image.width) / 2), round((base.height - image.height) / 2)),
        )
        return base

    def _depth_of_field(self, base: Image.Image, blur: float) -> Image.Image:
        """模糊背景 + 径向遮罩清晰前景."""
        background = base.filter(ImageFilter.GaussianBlur(blur))

        mask = radial_alpha_mask(
            base.width,
            base.height,
            self.focus_inner_radius,
            self.focus_outer_radius,
        )
        sharp = base.copy()
        sharp.putalpha(ImageChops.multiply(sharp.getchannel("A"), mask))

        return Image.alpha_composite(background, sharp)

    # ========================
    # 贴纸
    # ========================

    def _draw_sticker(self, canvas: Image.Image, sticker: Sticker) -> Image.Image:
        """绘制贴纸：平移到位置，旋转，缩放，以中心对齐."""
        target = canvas.width / STICKER_SIZE_DIVISOR * sticker.scale
        tile = self._render_glyph_tile(sticker.content, target)
        if tile is None:
            return canvas

        if sticker.rotation % 360:
            tile = tile.rotate(
                -sticker.rotation,
                resample=Image.Resampling.BICUBIC,
                expand=True,
            )

        cx = sticker.x / 100 * canvas.width
        cy = sticker.y / 100 * canvas.height
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        layer.paste(tile, (round(cx - tile.width / 2), round(cy - tile.height / 2)))
        return Image.alpha_composite(canvas, layer)

    def _render_glyph_tile(self, content: str, target_size: float) -> Optional[Image.Image]:
        """以原生字号绘制 Emoji，再缩放到目标尺寸."""
        font = find_emoji_font()
        native = getattr(font, "size", 10)

        bbox = ImageDraw.Draw(Image.new("RGBA", (1, 1))).textbbox(
            (0, 0), content, font=font, embedded_color=True
        )
        width, height = bbox[2] - bbox[0], bbox[3] - bbox[1]
        if width <= 0 or height <= 0:
            return None

        tile = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(tile).text(
            (-bbox[0], -bbox[1]),
            content,
            font=font,
            fill=(0, 0, 0, 255),
            embedded_color=True,
        )

        factor = target_size / native
        size = (max(1, round(width * factor)), max(1, round(height * factor)))
        return tile.resize(size, Image.Resampling.LANCZOS)

    # ========================
    # 文字
    # ========================

    def _draw_text(self, canvas: Image.Image, text: PosterText) -> Image.Image:
        """按预设或自定义排版绘制文字图层."""
        if not text.content.strip():
            return canvas

        typography = resolve_typography(text, canvas.width)
        font = find_font(
            typography.font_family,
            max(1, round(typography.font_size)),
            typography.bold,
            typography.italic,
            has_chinese_characters(text.content),
        )

        x = text.x / 100 * canvas.width
        y = text.y / 100 * canvas.height
        runs = layout_text(text.content, typography, x, y, measure=font.getlength)

        for text_pass in plan_text_passes(typography):
            layer = self._draw_pass(canvas.size, runs, font, text_pass)
            canvas = Image.alpha_composite(canvas, layer)

        return canvas

    def _draw_pass(
        self,
        size: tuple[int, int],
        runs: list,
        font,
        text_pass: TextPass,
    ) -> Image.Image:
        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)

        stroke = text_pass.stroke_width if text_pass.kind == PassKind.OUTLINE else 0
        for run in runs:
            draw.text(
                (run.x, run.y),
                run.text,
                font=font,
                fill=text_pass.color,
                anchor=run.anchor,
                stroke_width=stroke,
                stroke_fill=text_pass.color if stroke else None,
            )

        if text_pass.blur > 0:
            layer = layer.filter(ImageFilter.GaussianBlur(text_pass.blur))
        return layer
