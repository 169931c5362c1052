"""图片工具与辅助函数单元测试."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest
from PIL import Image

from poster_studio.utils.exceptions import ImageLoadError
from poster_studio.utils.helpers import clamp, generate_short_id, hex_to_rgba
from poster_studio.utils.image_utils import (
    bytes_to_data_url,
    data_url_to_bytes,
    decode_base64_payload,
    get_mime_type,
    image_to_bytes,
    load_source_image,
)


# ===================
# 源图加载测试
# ===================
class TestLoadSourceImage:
    """测试多种输入形式的解码."""

    def test_from_bytes(self, sample_png: bytes) -> None:
        image = load_source_image(sample_png)
        assert image.mode == "RGBA"
        assert image.size == (400, 300)

    def test_from_data_url(self, sample_png: bytes) -> None:
        assert load_source_image(bytes_to_data_url(sample_png)).size == (400, 300)

    def test_from_plain_base64(self, sample_png: bytes) -> None:
        assert load_source_image(base64.b64encode(sample_png).decode()).size == (400, 300)

    def test_from_path(self, sample_png: bytes, tmp_path: Path) -> None:
        path = tmp_path / "a.png"
        path.write_bytes(sample_png)
        assert load_source_image(path).size == (400, 300)
        assert load_source_image(str(path)).size == (400, 300)

    def test_from_pil_converts_mode(self) -> None:
        image = load_source_image(Image.new("RGB", (10, 10)))
        assert image.mode == "RGBA"

    def test_invalid_bytes(self) -> None:
        with pytest.raises(ImageLoadError):
            load_source_image(b"\x00\x01\x02")

    def test_invalid_base64(self) -> None:
        with pytest.raises(ImageLoadError):
            load_source_image("data:image/png;base64,@@@@")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImageLoadError):
            load_source_image(tmp_path / "missing.png")


# ===================
# 编码测试
# ===================
class TestEncoding:
    """测试 MIME 推断与 Data URL."""

    def test_png_is_lossless(self, sample_png: bytes) -> None:
        image = load_source_image(sample_png)
        assert load_source_image(image_to_bytes(image)).tobytes() == image.tobytes()

    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"\x89PNG\r\n\x1a\n", "image/png"),
            (b"\xff\xd8\xff\xe0", "image/jpeg"),
            (b"RIFF\x00\x00\x00\x00WEBP", "image/webp"),
            (b"GIF89a", "image/gif"),
            ("data:image/jpeg;base64,AAAA", "image/jpeg"),
            ("AAAA", "image/png"),
        ],
    )
    def test_mime_type(self, data, expected: str) -> None:
        assert get_mime_type(data) == expected

    def test_data_url(self, sample_png: bytes) -> None:
        url = bytes_to_data_url(sample_png)
        assert url.startswith("data:image/png;base64,")
        assert data_url_to_bytes(url) == sample_png
        assert decode_base64_payload(url.split(",", 1)[1]) == sample_png


# ===================
# 辅助函数测试
# ===================
class TestHelpers:
    """测试辅助函数."""

    @pytest.mark.parametrize(
        "color,expected",
        [
            ("#fff", (255, 255, 255, 255)),
            ("#00f2ff", (0, 242, 255, 255)),
            ("#11223380", (17, 34, 51, 128)),
            ("rgba(0,0,0,0.5)", (0, 0, 0, 128)),
            ("rgb(1, 2, 3)", (1, 2, 3, 255)),
        ],
    )
    def test_hex_to_rgba(self, color: str, expected: tuple) -> None:
        assert hex_to_rgba(color) == expected

    def test_invalid_color(self) -> None:
        with pytest.raises(ValueError):
            hex_to_rgba("#12345")

    def test_clamp(self) -> None:
        assert clamp(150, -10, 110) == 110
        assert clamp(-20, -10, 110) == -10
        assert clamp(5, -10, 110) == 5

    def test_short_id(self) -> None:
        assert len(generate_short_id()) == 8
        assert generate_short_id() != generate_short_id()
