"""AI 服务提供者抽象基类.

定义海报风格迁移所需的三个远程能力：文字识别、主体识别与图片风格转换。
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Optional

from poster_studio.models.api_config import AIProviderType
from poster_studio.utils.constants import API_TIMEOUT
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

TEXT_DETECTION_PROMPT = (
    "Please extract all visible text strings from this image. "
    "Return them as a simple JSON array of strings. "
    "Only return the JSON array, nothing else."
)

ENTITY_DETECTION_PROMPT = (
    "Identify the main subjects in this image (e.g., 'Person', 'Background', "
    "'Building', 'Dog'). Focus on 2-3 most prominent elements. "
    "Return them as a simple JSON array of strings. Only return the JSON array."
)


def parse_string_list(text: Optional[str]) -> list[str]:
    """解析模型返回的 JSON 字符串数组.

    容忍 Markdown 代码块包裹；空响应返回空列表。

    Raises:
        ValueError: 内容不是字符串数组
    """
    if not text:
        return []

    content = text.strip()
    if content.startswith("```"):
        content = content.strip("`")
        if content.lower().startswith("json"):
            content = content[4:]
        content = content.strip()

    data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError(f"期望 JSON 数组，实际为 {type(data).__name__}")
    return [str(item) for item in data if str(item).strip()]


class BaseAIProvider(ABC):
    """AI 服务提供者抽象基类.

    识别与风格转换失败时抛出 RemoteCallError 子类，由上层服务决定是否吸收。

    Attributes:
        provider_type: 提供者类型标识
        text_model: 识别使用的模型
        image_model: 风格转换使用的模型
    """

    provider_type: AIProviderType

    def __init__(
        self,
        api_key: str,
        text_model: Optional[str] = None,
        image_model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = API_TIMEOUT,
    ) -> None:
        """初始化提供者.

        Args:
            api_key: API 密钥
            text_model: 识别模型，为 None 时使用默认模型
            image_model: 图片模型，为 None 时使用默认模型
            base_url: API 基础 URL
            timeout: 请求超时时间 (秒)
        """
        self._api_key = api_key
        self.text_model = text_model or self.default_text_model
        self.image_model = image_model or self.default_image_model
        self._base_url = base_url
        self._timeout = timeout

    @property
    @abstractmethod
    def default_text_model(self) -> str:
        """默认识别模型."""

    @property
    @abstractmethod
    def default_image_model(self) -> str:
        """默认图片模型."""

    @abstractmethod
    async def detect_text(self, image: bytes, mime_type: str) -> list[str]:
        """识别图片中的可见文字.

        Args:
            image: 图片字节数据
            mime_type: 图片 MIME 类型

        Returns:
            文字字符串列表
        """

    @abstractmethod
    async def detect_entities(self, image: bytes, mime_type: str) -> list[str]:
        """识别图片中的主要主体（2-3 个）."""

    @abstractmethod
    async def edit_image(self, image: bytes, mime_type: str, prompt: str) -> bytes:
        """按提示词重绘图片.

        Returns:
            结果图片字节数据
        """

    async def close(self) -> None:
        """释放客户端资源."""

    async def __aenter__(self) -> "BaseAIProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
