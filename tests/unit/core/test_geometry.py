"""画面几何计算单元测试."""

from __future__ import annotations

import pytest

from poster_studio.core.geometry import CropRect, canvas_size_for, crop_for, next_rotation
from poster_studio.models.adjustments import AspectRatio


# ===================
# 裁剪区域测试
# ===================
class TestCropFor:
    """测试居中裁剪."""

    def test_original_keeps_full_image(self) -> None:
        """original 不裁剪."""
        assert crop_for(1200, 800, AspectRatio.ORIGINAL) == CropRect(0, 0, 1200, 800)

    def test_wide_source_square(self) -> None:
        """宽图裁剪为 1:1 时保留全部高度、水平居中."""
        assert crop_for(1200, 800, "1:1") == CropRect(200, 0, 800, 800)

    def test_tall_source_widescreen(self) -> None:
        """竖图裁剪为 16:9 时保留全部宽度、垂直居中."""
        crop = crop_for(800, 1200, AspectRatio.WIDESCREEN)
        assert crop.x == 0
        assert crop.width == 800
        assert crop.height == pytest.approx(450)
        assert crop.y == pytest.approx(375)

    @pytest.mark.parametrize("ratio", [r for r in AspectRatio if r is not AspectRatio.ORIGINAL])
    def test_crop_matches_ratio_and_is_centered(self, ratio: AspectRatio) -> None:
        """裁剪区域比例正确且居中."""
        crop = crop_for(1000, 700, ratio)
        assert crop.width / crop.height == pytest.approx(ratio.ratio)
        assert crop.x * 2 + crop.width == pytest.approx(1000)
        assert crop.y * 2 + crop.height == pytest.approx(700)

    def test_to_box(self) -> None:
        """转换为整数裁剪框."""
        assert CropRect(200.0, 0.0, 800.0, 800.0).to_box() == (200, 0, 1000, 800)

    def test_invalid_ratio(self) -> None:
        """无效比例抛出异常."""
        with pytest.raises(ValueError):
            crop_for(100, 100, "5:4")


# ===================
# 画布尺寸与旋转测试
# ===================
class TestCanvasSize:
    """测试旋转后的画布尺寸."""

    @pytest.mark.parametrize(
        "rotation,expected",
        [(0, (400, 300)), (90, (300, 400)), (180, (400, 300)), (270, (300, 400))],
    )
    def test_swap_on_quarter_turns(self, rotation: int, expected: tuple) -> None:
        """90°/270° 宽高互换."""
        assert canvas_size_for(400, 300, rotation) == expected

    def test_rotation_cycle(self) -> None:
        """四次旋转回到原点."""
        rotation = 0
        seen = []
        for _ in range(4):
            rotation = next_rotation(rotation)
            seen.append(rotation)
        assert seen == [90, 180, 270, 0]
