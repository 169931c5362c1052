"""图片工具函数模块.

提供源图片解码、PNG 编码与 Data URL 转换等工具函数。
"""

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from poster_studio.utils.exceptions import ImageLoadError
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 可作为源图片的输入类型
ImageSource = Union[bytes, str, Path, Image.Image]

DATA_URL_PREFIX = "data:"


def decode_base64_payload(data: str) -> bytes:
    """解析 Base64 或 Data URL 字符串.

    Args:
        data: ``data:image/png;base64,...`` 或纯 Base64 字符串

    Returns:
        图片字节数据

    Raises:
        ImageLoadError: 字符串不是合法的 Base64
    """
    if "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError(f"无效的 Base64 数据: {e}") from e


def get_mime_type(data: str | bytes) -> str:
    """推断图片 MIME 类型.

    Data URL 读取其声明的类型，字节数据根据文件头判断，默认 image/png。
    """
    if isinstance(data, str):
        if data.startswith(DATA_URL_PREFIX) and ";" in data:
            return data[len(DATA_URL_PREFIX):data.index(";")] or "image/png"
        return "image/png"

    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "image/png"


def _is_file_path(value: str) -> bool:
    if value.startswith(DATA_URL_PREFIX) or len(value) > 4096:
        return False
    try:
        return Path(value).is_file()
    except OSError:
        return False


def load_source_image(source: ImageSource) -> Image.Image:
    """加载源图片并完成解码.

    解码是整个合成流程中唯一可能失败的等待点：要么成功继续，要么抛出
    ImageLoadError，不做重试。

    Args:
        source: 字节数据、Data URL / Base64 字符串、文件路径或 PIL 图片

    Returns:
        RGBA 模式的 PIL 图片

    Raises:
        ImageLoadError: 图片无法解码
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA") if source.mode != "RGBA" else source.copy()

    try:
        if isinstance(source, bytes):
            image = Image.open(io.BytesIO(source))
        elif isinstance(source, Path):
            image = Image.open(source)
        elif _is_file_path(source):
            image = Image.open(source)
        else:
            image = Image.open(io.BytesIO(decode_base64_payload(source)))
        image.load()
    except ImageLoadError:
        raise
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"源图片解码失败: {e}")
        raise ImageLoadError(str(e)) from e

    return image.convert("RGBA")


def image_to_bytes(image: Image.Image, format: str = "PNG") -> bytes:
    """图片编码为字节数据（默认无损 PNG）."""
    buffer = io.BytesIO()
    image.save(buffer, format=format.upper())
    return buffer.getvalue()


def bytes_to_data_url(data: bytes, mime_type: str | None = None) -> str:
    """字节数据转 Data URL."""
    mime_type = mime_type or get_mime_type(data)
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def data_url_to_bytes(data_url: str) -> bytes:
    """Data URL 转字节数据."""
    return decode_base64_payload(data_url)
