"""Google Gemini 提供者.

使用 google-genai SDK 的异步接口完成识别与风格转换。识别请求要求模型按
JSON 字符串数组返回；风格转换从响应的 inline_data 中取出图片。
"""

from __future__ import annotations

from typing import Optional

from google import genai
from google.genai import errors, types

from poster_studio.models.api_config import AIProviderType
from poster_studio.services.ai_providers.base import (
    ENTITY_DETECTION_PROMPT,
    TEXT_DETECTION_PROMPT,
    BaseAIProvider,
    parse_string_list,
)
from poster_studio.utils.exceptions import (
    APIRequestError,
    APITimeoutError,
    RemoteCallError,
)
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"


class GeminiProvider(BaseAIProvider):
    """Gemini 提供者.

    Example:
        >>> async with GeminiProvider(api_key) as provider:
        ...     texts = await provider.detect_text(png, "image/png")
    """

    provider_type = AIProviderType.GEMINI

    def __init__(self, api_key: str, **kwargs) -> None:
        super().__init__(api_key, **kwargs)
        self._client: Optional[genai.Client] = None

    @property
    def default_text_model(self) -> str:
        return DEFAULT_TEXT_MODEL

    @property
    def default_image_model(self) -> str:
        return DEFAULT_IMAGE_MODEL

    @property
    def client(self) -> genai.Client:
        """获取 Gemini 客户端（懒加载）."""
        if self._client is None:
            http_options = types.HttpOptions(
                timeout=self._timeout * 1000,
                base_url=self._base_url,
            )
            self._client = genai.Client(api_key=self._api_key, http_options=http_options)
        return self._client

    async def detect_text(self, image: bytes, mime_type: str) -> list[str]:
        return await self._detect(image, mime_type, TEXT_DETECTION_PROMPT, "文字识别")

    async def detect_entities(self, image: bytes, mime_type: str) -> list[str]:
        return await self._detect(image, mime_type, ENTITY_DETECTION_PROMPT, "主体识别")

    async def edit_image(self, image: bytes, mime_type: str, prompt: str) -> bytes:
        """调用图片模型重绘，返回第一个图片片段."""
        logger.info(f"开始风格转换: model={self.image_model}")
        response = await self._generate(
            self.image_model,
            [types.Part.from_bytes(data=image, mime_type=mime_type), prompt],
            None,
            "风格转换",
        )

        for candidate in response.candidates or []:
            if candidate.content is None:
                continue
            for part in candidate.content.parts or []:
                if part.inline_data and part.inline_data.data:
                    logger.info(f"风格转换完成: 输出大小 {len(part.inline_data.data)} bytes")
                    return part.inline_data.data

        raise RemoteCallError("AI 未返回图片数据")

    async def _detect(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        operation: str,
    ) -> list[str]:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=list[str],
        )
        response = await self._generate(
            self.text_model,
            [types.Part.from_bytes(data=image, mime_type=mime_type), prompt],
            config,
            operation,
        )
        try:
            result = parse_string_list(response.text)
        except ValueError as e:
            raise RemoteCallError(f"{operation}结果无法解析: {e}") from e
        logger.debug(f"{operation}完成: {result}")
        return result

    async def _generate(
        self,
        model: str,
        contents: list,
        config: Optional[types.GenerateContentConfig],
        operation: str,
    ) -> types.GenerateContentResponse:
        try:
            return await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            logger.error(f"Gemini API 错误: {operation}, code={e.code}, message={e.message}")
            if e.code in (408, 504):
                raise APITimeoutError(self._timeout) from e
            raise APIRequestError(e.message or str(e), e.code) from e
        except TimeoutError as e:
            logger.error(f"Gemini 请求超时: {operation}")
            raise APITimeoutError(self._timeout) from e

    async def close(self) -> None:
        """关闭异步客户端连接."""
        if self._client is not None:
            await self._client.aio.aclose()
            self._client = None
            logger.debug("Gemini 客户端已关闭")
