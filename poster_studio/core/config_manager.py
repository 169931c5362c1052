"""配置管理器模块."""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import ValidationError

from poster_studio.models.api_config import APIConfig
from poster_studio.models.app_settings import Settings
from poster_studio.utils.constants import APP_DATA_DIR
from poster_studio.utils.exceptions import ConfigError
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 用户偏好文件（界面状态，如上次导出目录）
USER_CONFIG_FILE = APP_DATA_DIR / "config.json"


class ConfigManager:
    """配置管理器.

    负责加载应用设置，并由设置派生出 AI 连接配置。

    Attributes:
        settings: 应用设置
        api_config: AI 连接配置
    """

    _instance: Optional["ConfigManager"] = None

    def __new__(cls) -> "ConfigManager":
        """单例模式."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        self._settings: Optional[Settings] = None
        self._initialized = True
        logger.debug("配置管理器初始化完成")

    @property
    def settings(self) -> Settings:
        """获取应用设置."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    @property
    def api_config(self) -> APIConfig:
        """由应用设置构建 AI 连接配置."""
        s = self.settings
        try:
            return APIConfig(
                provider=s.ai_provider,
                api_key=s.api_key,
                base_url=s.api_base_url,
                text_model=s.text_model,
                image_model=s.image_model,
                timeout=s.api_timeout,
            )
        except ValidationError as e:
            raise ConfigError(f"AI 连接配置无效: {e}") from e

    def _load_settings(self) -> Settings:
        """从环境变量和 .env 文件加载应用设置.

        Raises:
            ConfigError: 设置无效
        """
        try:
            settings = Settings()
        except ValidationError as e:
            logger.error(f"加载应用设置失败: {e}")
            raise ConfigError(f"加载应用设置失败: {e}") from e

        logger.debug(
            f"应用设置加载完成: log_level={settings.log_level}, "
            f"provider={settings.ai_provider.value}"
        )
        return settings

    def _load_user_config(self) -> dict[str, Any]:
        if not USER_CONFIG_FILE.exists():
            return {}
        try:
            return json.loads(USER_CONFIG_FILE.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"加载用户配置文件失败: {e}")
            return {}

    def get_user_config(self, key: str, default: Any = None) -> Any:
        """获取用户偏好项."""
        return self._load_user_config().get(key, default)

    def set_user_config(self, key: str, value: Any) -> None:
        """保存用户偏好项.

        Raises:
            ConfigError: 写入失败
        """
        config = self._load_user_config()
        config[key] = value
        try:
            USER_CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
            USER_CONFIG_FILE.write_text(
                json.dumps(config, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"保存用户配置失败: {e}")
            raise ConfigError(f"保存用户配置失败: {e}") from e

    def reload(self) -> None:
        """重新加载设置."""
        self._settings = None
        logger.info("配置已重新加载")


def get_config() -> ConfigManager:
    """获取配置管理器实例."""
    return ConfigManager()
