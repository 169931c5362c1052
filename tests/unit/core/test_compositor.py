"""海报合成器单元测试."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from PIL import Image, ImageFont

from poster_studio.core.compositor import Compositor, color_lut, radial_alpha_mask
from poster_studio.models.adjustments import (
    Adjustments,
    AspectRatio,
    PosterText,
    Sticker,
    TextStyle,
)
from poster_studio.utils.exceptions import ImageLoadError


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data)).convert("RGBA")


@pytest.fixture
def compositor() -> Compositor:
    """默认合成器."""
    return Compositor()


@pytest.fixture
def split_png() -> bytes:
    """左半红、右半蓝的 400x300 图片."""
    image = Image.new("RGBA", (400, 300), (0, 0, 255, 255))
    image.paste((255, 0, 0, 255), (0, 0, 200, 300))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


# ===================
# 查找表与遮罩测试
# ===================
class TestColorLut:
    """测试亮度/对比度查找表."""

    def test_neutral_is_identity(self) -> None:
        """100% / 100% 不改变像素."""
        assert color_lut(100, 100) == list(range(256))

    def test_zero_brightness_is_black(self) -> None:
        """亮度 0 得到全黑（对比度不变时）."""
        assert set(color_lut(0, 100)) == {0}

    def test_zero_contrast_is_flat_gray(self) -> None:
        """对比度 0 得到单一灰度."""
        assert len(set(color_lut(100, 0))) == 1

    def test_values_clamped(self) -> None:
        """结果限制在 0-255."""
        lut = color_lut(200, 200)
        assert min(lut) == 0
        assert max(lut) == 255
        assert len(lut) == 256


class TestRadialAlphaMask:
    """测试景深径向遮罩."""

    def test_center_opaque_corner_transparent(self) -> None:
        """中心完全不透明，角落完全透明."""
        mask = radial_alpha_mask(100, 300, 0.2, 0.7)
        assert mask.mode == "L"
        assert mask.size == (100, 300)
        assert mask.getpixel((50, 150)) == 255
        assert mask.getpixel((0, 0)) == 0

    def test_monotonic_falloff(self) -> None:
        """从中心向外透明度不增加."""
        mask = radial_alpha_mask(200, 200, 0.1, 0.5)
        values = [mask.getpixel((100 + dx, 100)) for dx in range(0, 100, 5)]
        assert values == sorted(values, reverse=True)

    def test_invalid_radii(self) -> None:
        """外半径不大于内半径抛出异常."""
        with pytest.raises(ValueError):
            radial_alpha_mask(10, 10, 0.5, 0.5)

    def test_compositor_rejects_invalid_radii(self) -> None:
        """合成器同样校验半径."""
        with pytest.raises(ValueError):
            Compositor(focus_inner_radius=0.7, focus_outer_radius=0.2)


# ===================
# 底图测试
# ===================
class TestBaseLayer:
    """测试裁剪、旋转与调色."""

    def test_default_output_size(self, compositor: Compositor, sample_png: bytes) -> None:
        """无调整时尺寸不变."""
        assert _open(compositor.render(sample_png, Adjustments())).size == (400, 300)

    def test_rotation_swaps_dimensions(self, compositor: Compositor, sample_png: bytes) -> None:
        """旋转 90° 后宽高互换."""
        result = _open(compositor.render(sample_png, Adjustments(rotation=90)))
        assert result.size == (300, 400)

    def test_rotation_is_clockwise(self, compositor: Compositor, split_png: bytes) -> None:
        """顺时针旋转 90° 后原左侧（红）位于上方."""
        result = _open(compositor.render(split_png, Adjustments(rotation=90)))
        assert result.getpixel((150, 50))[:3] == (255, 0, 0)
        assert result.getpixel((150, 350))[:3] == (0, 0, 255)

    def test_rotation_180(self, compositor: Compositor, split_png: bytes) -> None:
        """旋转 180° 后左右对调."""
        result = _open(compositor.render(split_png, Adjustments(rotation=180)))
        assert result.getpixel((50, 150))[:3] == (0, 0, 255)
        assert result.getpixel((350, 150))[:3] == (255, 0, 0)

    def test_crop_square(self, compositor: Compositor, png_factory) -> None:
        """1200x800 裁剪为 1:1 得到 800x800."""
        source = png_factory((1200, 800))
        adjustments = Adjustments(aspect_ratio=AspectRatio.SQUARE)
        assert _open(compositor.render(source, adjustments)).size == (800, 800)

    def test_crop_then_rotate(self, compositor: Compositor, png_factory) -> None:
        """先裁剪再旋转."""
        source = png_factory((1600, 900))
        adjustments = Adjustments(aspect_ratio=AspectRatio.STANDARD, rotation=270)
        assert _open(compositor.render(source, adjustments)).size == (900, 1200)

    def test_brightness_zero(self, compositor: Compositor, sample_png: bytes) -> None:
        """亮度 0 得到黑色，透明度不变."""
        result = _open(compositor.render(sample_png, Adjustments(brightness=0)))
        assert result.getpixel((10, 10)) == (0, 0, 0, 255)

    def test_render_is_deterministic(self, compositor: Compositor, sample_png: bytes) -> None:
        """相同输入得到相同输出."""
        adjustments = Adjustments(
            rotation=90,
            brightness=120,
            contrast=80,
            blur=4,
            texts=[PosterText(content="SALE", style=TextStyle.BOLD)],
            stickers=[Sticker(content="⭐", rotation=30)],
        )
        assert compositor.render(sample_png, adjustments) == compositor.render(
            sample_png, adjustments
        )

    def test_invalid_source(self, compositor: Compositor) -> None:
        """无法解码的源图抛出 ImageLoadError."""
        with pytest.raises(ImageLoadError):
            compositor.render(b"not an image", Adjustments())


# ===================
# 景深测试
# ===================
class TestDepthOfField:
    """测试景深模糊."""

    def test_center_stays_sharp(self, compositor: Compositor) -> None:
        """中心保持清晰，边缘被模糊."""
        image = Image.new("RGBA", (200, 200), (255, 255, 255, 255))
        for x in range(0, 200, 2):
            image.paste((0, 0, 0, 255), (x, 0, x + 1, 200))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")

        result = _open(compositor.render(buffer.getvalue(), Adjustments(blur=6)))
        assert result.getpixel((100, 100)) == image.getpixel((100, 100))
        assert result.getpixel((101, 100)) == image.getpixel((101, 100))
        edge = result.getpixel((1, 1))[0]
        assert 0 < edge < 255


# ===================
# 叠加层测试
# ===================
class TestOverlays:
    """测试文字与贴纸."""

    def test_bold_text_draws_yellow(self, compositor: Compositor, png_factory) -> None:
        """bold 样式绘制黄色填充."""
        source = png_factory((600, 400), (40, 40, 40, 255))
        adjustments = Adjustments(texts=[PosterText(content="HELLO", style=TextStyle.BOLD)])
        result = _open(compositor.render(source, adjustments))
        colors = {color for _, color in result.getcolors(1 << 20)}
        assert (255, 255, 0, 255) in colors

    def test_text_changes_output(self, compositor: Compositor, sample_png: bytes) -> None:
        """添加文字改变输出."""
        plain = compositor.render(sample_png, Adjustments())
        with_text = compositor.render(
            sample_png, Adjustments(texts=[PosterText(content="Hi")])
        )
        assert plain != with_text

    def test_blank_text_is_skipped(self, compositor: Compositor, sample_png: bytes) -> None:
        """空白文字不绘制."""
        plain = compositor.render(sample_png, Adjustments())
        blank = compositor.render(sample_png, Adjustments(texts=[PosterText(content="  ")]))
        assert plain == blank

    def test_sticker_changes_output(self, compositor: Compositor, sample_png: bytes) -> None:
        """添加贴纸改变输出."""
        plain = compositor.render(sample_png, Adjustments())
        font = ImageFont.load_default(size=40)
        with patch("poster_studio.core.compositor.find_emoji_font", return_value=font):
            with_sticker = compositor.render(
                sample_png, Adjustments(stickers=[Sticker(content="A", scale=2)])
            )
        assert plain != with_sticker
