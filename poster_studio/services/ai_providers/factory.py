"""AI 提供者工厂."""

from __future__ import annotations

from poster_studio.models.api_config import AIProviderType, APIConfig
from poster_studio.services.ai_providers.base import BaseAIProvider
from poster_studio.services.ai_providers.gemini_provider import GeminiProvider
from poster_studio.services.ai_providers.openai_provider import OpenAIProvider
from poster_studio.utils.exceptions import APIKeyNotFoundError
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 提供者类型到类的映射
_PROVIDER_CLASSES: dict[AIProviderType, type[BaseAIProvider]] = {
    AIProviderType.GEMINI: GeminiProvider,
    AIProviderType.OPENAI: OpenAIProvider,
}


def get_available_providers() -> list[AIProviderType]:
    """获取可用的提供者类型列表."""
    return list(_PROVIDER_CLASSES.keys())


def create_ai_provider(config: APIConfig) -> BaseAIProvider:
    """按 API 配置创建提供者实例.

    Args:
        config: API 配置

    Returns:
        AI 提供者实例

    Raises:
        APIKeyNotFoundError: 未配置 API 密钥
        ValueError: 提供者类型不支持
    """
    if not config.has_api_key:
        raise APIKeyNotFoundError()

    provider_class = _PROVIDER_CLASSES.get(config.provider)
    if provider_class is None:
        raise ValueError(f"不支持的 AI 提供者类型: {config.provider}")

    logger.info(f"创建 AI 提供者: {config.provider.value}")
    return provider_class(
        api_key=config.get_api_key_value(),
        text_model=config.text_model,
        image_model=config.image_model,
        base_url=config.base_url,
        timeout=config.timeout,
    )
