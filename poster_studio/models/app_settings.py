"""应用设置模型."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from poster_studio.models.api_config import AIProviderType
from poster_studio.utils.constants import (
    API_TIMEOUT,
    DATABASE_PATH,
    DEFAULT_FOCUS_INNER_RADIUS,
    DEFAULT_FOCUS_OUTER_RADIUS,
    HISTORY_CAPACITY,
)


class Settings(BaseSettings):
    """应用设置.

    支持从环境变量和 .env 文件加载配置。

    Attributes:
        log_level: 日志级别
        ai_provider: AI 服务商
        api_key: API 密钥
        api_base_url: API 基础 URL（为空使用服务商默认值）
        text_model: 识别模型
        image_model: 图片生成模型
        api_timeout: 请求超时（秒）
        history_capacity: 历史记录容量
        focus_inner_radius: 景深清晰区半径（占画布宽度比例）
        focus_outer_radius: 景深过渡区外半径（占画布宽度比例）
        database_path: 数据库文件路径
        debug: 调试模式
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="日志级别")

    # AI 配置
    ai_provider: AIProviderType = Field(
        default=AIProviderType.GEMINI,
        description="AI 服务商",
    )
    api_key: Optional[SecretStr] = Field(default=None, description="API 密钥")
    api_base_url: Optional[str] = Field(default=None, description="API 基础 URL")
    text_model: Optional[str] = Field(default=None, description="识别模型")
    image_model: Optional[str] = Field(default=None, description="图片模型")
    api_timeout: int = Field(default=API_TIMEOUT, ge=10, le=600, description="超时")

    # 编辑器配置
    history_capacity: int = Field(
        default=HISTORY_CAPACITY,
        ge=1,
        le=50,
        description="历史记录容量",
    )
    focus_inner_radius: float = Field(
        default=DEFAULT_FOCUS_INNER_RADIUS,
        ge=0.0,
        le=2.0,
        description="景深清晰区半径",
    )
    focus_outer_radius: float = Field(
        default=DEFAULT_FOCUS_OUTER_RADIUS,
        ge=0.0,
        le=2.0,
        description="景深过渡区外半径",
    )

    database_path: Optional[Path] = Field(default=None, description="数据库文件路径")

    debug: bool = Field(default=False, description="调试模式")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"无效的日志级别: {v}，有效值: {valid_levels}")
        return upper_v

    @model_validator(mode="after")
    def validate_focus_radii(self) -> "Settings":
        """外半径必须大于内半径."""
        if self.focus_outer_radius <= self.focus_inner_radius:
            raise ValueError("focus_outer_radius 必须大于 focus_inner_radius")
        return self

    @property
    def db_path(self) -> Path:
        """获取数据库路径."""
        return self.database_path or DATABASE_PATH
