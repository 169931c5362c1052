"""OpenAI 提供者.

识别使用视觉对话模型，风格转换使用图片编辑接口。
"""

from __future__ import annotations

import base64
import io
from typing import Optional

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError as OpenAITimeoutError,
    AsyncOpenAI,
)

from poster_studio.models.api_config import AIProviderType
from poster_studio.services.ai_providers.base import (
    ENTITY_DETECTION_PROMPT,
    TEXT_DETECTION_PROMPT,
    BaseAIProvider,
    parse_string_list,
)
from poster_studio.utils.constants import DEFAULT_OPENAI_BASE
from poster_studio.utils.exceptions import (
    APIRequestError,
    APITimeoutError,
    RemoteCallError,
)
from poster_studio.utils.image_utils import bytes_to_data_url
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_TEXT_MODEL = "gpt-4o-mini"
DEFAULT_IMAGE_MODEL = "gpt-image-1"


class OpenAIProvider(BaseAIProvider):
    """OpenAI 提供者."""

    provider_type = AIProviderType.OPENAI

    def __init__(self, api_key: str, **kwargs) -> None:
        super().__init__(api_key, **kwargs)
        self._base_url = self._base_url or DEFAULT_OPENAI_BASE
        self._client: Optional[AsyncOpenAI] = None

    @property
    def default_text_model(self) -> str:
        return DEFAULT_TEXT_MODEL

    @property
    def default_image_model(self) -> str:
        return DEFAULT_IMAGE_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        """获取 OpenAI 异步客户端."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,  # 远程调用失败不重试
            )
        return self._client

    async def detect_text(self, image: bytes, mime_type: str) -> list[str]:
        return await self._detect(image, mime_type, TEXT_DETECTION_PROMPT, "文字识别")

    async def detect_entities(self, image: bytes, mime_type: str) -> list[str]:
        return await self._detect(image, mime_type, ENTITY_DETECTION_PROMPT, "主体识别")

    async def _detect(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        operation: str,
    ) -> list[str]:
        messages = [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": bytes_to_data_url(image, mime_type)},
                    },
                    {"type": "text", "text": prompt},
                ],
            }
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.text_model,
                messages=messages,
            )
        except Exception as e:
            raise self._convert_error(e, operation) from e

        content = response.choices[0].message.content if response.choices else None
        try:
            result = parse_string_list(content)
        except ValueError as e:
            raise RemoteCallError(f"{operation}结果无法解析: {e}") from e
        logger.debug(f"{operation}完成: {result}")
        return result

    async def edit_image(self, image: bytes, mime_type: str, prompt: str) -> bytes:
        """调用图片编辑接口重绘."""
        logger.info(f"开始风格转换: model={self.image_model}")

        image_file = io.BytesIO(image)
        image_file.name = "image.png"

        try:
            response = await self.client.images.edit(
                model=self.image_model,
                image=image_file,
                prompt=prompt,
                n=1,
            )
        except Exception as e:
            raise self._convert_error(e, "风格转换") from e

        if response.data and response.data[0].b64_json:
            result = base64.b64decode(response.data[0].b64_json)
            logger.info(f"风格转换完成: 输出大小 {len(result)} bytes")
            return result

        raise RemoteCallError("AI 未返回图片数据")

    def _convert_error(self, error: Exception, operation: str) -> RemoteCallError:
        if isinstance(error, OpenAITimeoutError):
            logger.error(f"AI 请求超时: {operation}")
            return APITimeoutError(self._timeout)
        if isinstance(error, APIStatusError):
            logger.error(
                f"AI API 错误: {operation}, status={error.status_code}, message={error.message}"
            )
            return APIRequestError(error.message, error.status_code)
        if isinstance(error, APIConnectionError):
            logger.error(f"AI 连接错误: {operation}, {error}")
            return APIRequestError(f"无法连接到 AI 服务: {error}")
        logger.exception(f"AI 调用未知错误: {operation}")
        return RemoteCallError(f"{operation}失败: {error}")

    async def close(self) -> None:
        """关闭客户端连接."""
        if self._client:
            await self._client.close()
            self._client = None
            logger.debug("OpenAI 客户端已关闭")
