"""API 配置模型."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

from poster_studio.utils.constants import API_TIMEOUT


class AIProviderType(str, Enum):
    """AI 服务商类型."""

    GEMINI = "gemini"  # Google Gemini
    OPENAI = "openai"  # OpenAI


class APIConfig(BaseModel):
    """AI 服务连接配置.

    Attributes:
        provider: 服务商
        api_key: API 密钥（敏感信息）
        base_url: API 基础 URL，为 None 时使用服务商默认值
        text_model: 文字/主体识别模型
        image_model: 风格转换模型
        timeout: 请求超时时间
    """

    provider: AIProviderType = Field(default=AIProviderType.GEMINI)
    api_key: Optional[SecretStr] = Field(default=None, description="API 密钥")
    base_url: Optional[str] = Field(default=None, description="API 基础 URL")
    text_model: Optional[str] = Field(default=None, description="识别模型")
    image_model: Optional[str] = Field(default=None, description="图片模型")
    timeout: int = Field(
        default=API_TIMEOUT,
        ge=10,
        le=600,
        description="请求超时时间 (秒)",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """验证 API URL."""
        if v is None:
            return v
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URL 必须以 http:// 或 https:// 开头")
        return v

    @property
    def has_api_key(self) -> bool:
        """检查是否配置了 API 密钥."""
        return self.api_key is not None and len(self.api_key.get_secret_value()) > 0

    def get_api_key_value(self) -> Optional[str]:
        """获取 API 密钥明文值.

        注意: 仅在需要时调用，不要记录日志。
        """
        if self.api_key:
            return self.api_key.get_secret_value()
        return None

    def to_safe_dict(self) -> dict:
        """转换为安全字典（隐藏敏感信息）."""
        return {
            "provider": self.provider.value,
            "base_url": self.base_url,
            "has_api_key": self.has_api_key,
            "text_model": self.text_model,
            "image_model": self.image_model,
            "timeout": self.timeout,
        }
