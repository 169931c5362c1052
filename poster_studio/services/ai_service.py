"""AI 服务模块.

在 AI 提供者之上实现海报相关的远程能力及其失败策略。

Features:
    - 文字识别：失败时返回空列表，不抛异常
    - 主体识别：失败时返回默认主体
    - 并发分析：文字与主体识别同时进行
    - 风格转换：拼装提示词，失败时抛出 RemoteCallError，不重试
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from poster_studio.models.analysis import (
    AnalysisResult,
    EntityModification,
    TextReplacement,
)
from poster_studio.models.api_config import APIConfig
from poster_studio.models.style_option import ArtStyle, StyleOption
from poster_studio.services.ai_providers.base import BaseAIProvider
from poster_studio.services.ai_providers.factory import create_ai_provider
from poster_studio.utils.constants import FALLBACK_ENTITIES
from poster_studio.utils.error_handler import safe_execute_async
from poster_studio.utils.exceptions import RemoteCallError, UserInputError
from poster_studio.utils.image_utils import decode_base64_payload, get_mime_type
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


def build_prompt(
    style: StyleOption,
    custom_prompt: str = "",
    text_replacements: Sequence[TextReplacement] = (),
    entity_modifications: Sequence[EntityModification] = (),
) -> str:
    """拼装风格转换提示词.

    custom 风格使用用户输入的提示词，其余使用风格预设。只有内容非空且与原文
    不同的文字替换、以及填写了指令的主体改造会被追加。

    Example:
        >>> build_prompt(style, text_replacements=[TextReplacement(original="a", replacement="b")])
        '... IMPORTANT: Change the text that says "a" to "b". Ensure the new text ...'
    """
    prompt = custom_prompt if style.id == ArtStyle.CUSTOM else style.prompt

    replacements = " ".join(
        f'Change the text that says "{tr.original}" to "{tr.replacement}".'
        for tr in text_replacements
        if tr.is_effective
    )
    if replacements:
        prompt += (
            f" IMPORTANT: {replacements} "
            "Ensure the new text is rendered clearly and integrated naturally."
        )

    modifications = " ".join(
        f"Modify the {em.entity}: {em.instruction}."
        for em in entity_modifications
        if em.is_effective
    )
    if modifications:
        prompt += f" SUBJECT MODIFICATIONS: {modifications}"

    return prompt


def _prepare_image(image: bytes | str) -> tuple[bytes, str]:
    """将 PNG 字节或 Data URL 转换为 (字节, MIME 类型)."""
    if isinstance(image, str):
        return decode_base64_payload(image), get_mime_type(image)
    return image, get_mime_type(image)


class PosterAIService:
    """海报 AI 服务.

    Attributes:
        config: API 配置

    Example:
        >>> service = PosterAIService(APIConfig(api_key="..."))
        >>> analysis = await service.analyze(png_bytes)
        >>> result = await service.transform_style(png_bytes, style)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        provider: Optional[BaseAIProvider] = None,
    ) -> None:
        """初始化 AI 服务.

        Args:
            config: API 配置
            provider: 直接指定的提供者，为 None 时按配置创建
        """
        self._config = config or APIConfig()
        self._provider = provider

    @property
    def config(self) -> APIConfig:
        """获取 API 配置."""
        return self._config

    @config.setter
    def config(self, value: APIConfig) -> None:
        """设置 API 配置并重置提供者."""
        self._config = value
        self._provider = None

    @property
    def provider(self) -> BaseAIProvider:
        """获取或创建 AI 提供者.

        Raises:
            APIKeyNotFoundError: 未配置 API 密钥
        """
        if self._provider is None:
            self._provider = create_ai_provider(self._config)
        return self._provider

    # ========================
    # 识别
    # ========================

    async def detect_text(self, image: bytes | str) -> list[str]:
        """识别图片中的文字，任何失败都返回空列表."""
        texts = await safe_execute_async(self._call_detect_text, image, default=[])
        return texts or []

    async def detect_entities(self, image: bytes | str) -> list[str]:
        """识别图片中的主体，失败时返回默认主体."""
        entities = await safe_execute_async(
            self._call_detect_entities, image, default=None
        )
        if entities is None:
            return list(FALLBACK_ENTITIES)
        return entities

    async def analyze(self, image: bytes | str) -> AnalysisResult:
        """并发识别文字与主体，生成待编辑的分析结果.

        不会因为识别失败而抛出异常。
        """
        logger.info("开始图片分析")
        texts, entities = await asyncio.gather(
            self.detect_text(image),
            self.detect_entities(image),
        )
        logger.info(f"图片分析完成: 文字 {len(texts)} 条, 主体 {len(entities)} 个")
        return AnalysisResult.from_detections(texts, entities)

    async def _call_detect_text(self, image: bytes | str) -> list[str]:
        data, mime_type = _prepare_image(image)
        return await self.provider.detect_text(data, mime_type)

    async def _call_detect_entities(self, image: bytes | str) -> list[str]:
        data, mime_type = _prepare_image(image)
        return await self.provider.detect_entities(data, mime_type)

    # ========================
    # 风格转换
    # ========================

    async def transform_style(
        self,
        image: bytes | str,
        style: StyleOption,
        custom_prompt: str = "",
        text_replacements: Sequence[TextReplacement] = (),
        entity_modifications: Sequence[EntityModification] = (),
    ) -> bytes:
        """按风格重绘图片.

        Returns:
            结果图片字节数据

        Raises:
            UserInputError: custom 风格未填写提示词
            RemoteCallError: 远程调用失败
        """
        prompt = build_prompt(style, custom_prompt, text_replacements, entity_modifications)
        if not prompt.strip():
            raise UserInputError("请输入自定义风格描述")

        data, mime_type = _prepare_image(image)
        logger.info(f"开始风格转换: {style.label}")
        logger.debug(f"提示词: {prompt}")

        try:
            return await self.provider.edit_image(data, mime_type, prompt)
        except RemoteCallError:
            raise
        except Exception as e:
            logger.exception("风格转换失败")
            raise RemoteCallError(f"转换失败: {e}") from e

    async def close(self) -> None:
        """释放提供者资源."""
        if self._provider is not None:
            await self._provider.close()
            self._provider = None
            logger.debug("AI 服务已关闭")

    async def __aenter__(self) -> "PosterAIService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
