"""AI 提供者模块."""

from poster_studio.services.ai_providers.base import BaseAIProvider, parse_string_list
from poster_studio.services.ai_providers.factory import (
    create_ai_provider,
    get_available_providers,
)
from poster_studio.services.ai_providers.gemini_provider import GeminiProvider
from poster_studio.services.ai_providers.openai_provider import OpenAIProvider

__all__ = [
    "BaseAIProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "create_ai_provider",
    "get_available_providers",
    "parse_string_list",
]
