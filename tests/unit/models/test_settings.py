"""应用设置、API 配置与风格选项单元测试."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from poster_studio.models.api_config import AIProviderType, APIConfig
from poster_studio.models.app_settings import Settings
from poster_studio.models.style_option import (
    CUSTOM_STYLE,
    STYLE_OPTIONS,
    ArtStyle,
    get_style_option,
)
from poster_studio.utils.constants import DATABASE_PATH


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """隔离环境变量与 .env 文件."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "LOG_LEVEL",
        "AI_PROVIDER",
        "API_KEY",
        "API_BASE_URL",
        "HISTORY_CAPACITY",
        "FOCUS_INNER_RADIUS",
        "FOCUS_OUTER_RADIUS",
        "DATABASE_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


# ===================
# Settings 测试
# ===================
class TestSettings:
    """测试应用设置."""

    def test_defaults(self) -> None:
        """默认值."""
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.ai_provider == AIProviderType.GEMINI
        assert settings.api_key is None
        assert settings.history_capacity == 5
        assert (settings.focus_inner_radius, settings.focus_outer_radius) == (0.2, 0.7)
        assert settings.db_path == DATABASE_PATH

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """从环境变量读取."""
        monkeypatch.setenv("AI_PROVIDER", "openai")
        monkeypatch.setenv("API_KEY", "sk-test")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("HISTORY_CAPACITY", "3")
        settings = Settings()
        assert settings.ai_provider == AIProviderType.OPENAI
        assert settings.api_key.get_secret_value() == "sk-test"
        assert settings.log_level == "DEBUG"
        assert settings.history_capacity == 3

    def test_from_dotenv(self, tmp_path: Path) -> None:
        """从 .env 文件读取."""
        (tmp_path / ".env").write_text("API_KEY=from-file\n", encoding="utf-8")
        assert Settings().api_key.get_secret_value() == "from-file"

    def test_invalid_log_level(self) -> None:
        """无效日志级别被拒绝."""
        with pytest.raises(ValidationError):
            Settings(log_level="VERBOSE")

    def test_focus_radii_order(self) -> None:
        """外半径必须大于内半径."""
        with pytest.raises(ValidationError):
            Settings(focus_inner_radius=0.6, focus_outer_radius=0.4)

    def test_custom_database_path(self, tmp_path: Path) -> None:
        """自定义数据库路径."""
        assert Settings(database_path=tmp_path / "x.db").db_path == tmp_path / "x.db"


# ===================
# APIConfig 测试
# ===================
class TestAPIConfig:
    """测试 API 配置."""

    def test_has_api_key(self) -> None:
        """检查密钥是否配置."""
        assert not APIConfig().has_api_key
        assert not APIConfig(api_key=SecretStr("")).has_api_key
        assert APIConfig(api_key=SecretStr("k")).has_api_key

    def test_base_url_normalized(self) -> None:
        """URL 去掉末尾斜杠."""
        assert APIConfig(base_url="https://example.com/v1/").base_url == "https://example.com/v1"

    def test_invalid_base_url(self) -> None:
        """URL 必须以 http(s) 开头."""
        with pytest.raises(ValidationError):
            APIConfig(base_url="ftp://example.com")

    def test_safe_dict_hides_key(self) -> None:
        """安全字典不包含密钥."""
        safe = APIConfig(api_key=SecretStr("secret")).to_safe_dict()
        assert "secret" not in str(safe)
        assert safe["has_api_key"] is True


# ===================
# 风格选项测试
# ===================
class TestStyleOptions:
    """测试风格预设."""

    def test_presets_have_prompts(self) -> None:
        """预设风格都有提示词且 ID 唯一."""
        assert len(STYLE_OPTIONS) == 9
        assert all(option.prompt for option in STYLE_OPTIONS)
        assert len({option.id for option in STYLE_OPTIONS}) == len(STYLE_OPTIONS)

    def test_custom_has_no_prompt(self) -> None:
        """custom 风格不带预设提示词."""
        assert CUSTOM_STYLE.prompt == ""
        assert CUSTOM_STYLE not in STYLE_OPTIONS

    def test_lookup(self) -> None:
        """按 ID 查找."""
        assert get_style_option("watercolor").id == ArtStyle.WATERCOLOR
        assert get_style_option(ArtStyle.CUSTOM) is CUSTOM_STYLE

    def test_lookup_unknown(self) -> None:
        """未知 ID 抛出异常."""
        with pytest.raises(ValueError):
            get_style_option("baroque")
