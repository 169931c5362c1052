"""集成测试配置和共享 fixtures."""

from pathlib import Path
from typing import Generator

import pytest

from poster_studio.core import config_manager
from poster_studio.core.config_manager import ConfigManager
from poster_studio.services.kv_store import KeyValueStore, open_store
from poster_studio.utils import constants


@pytest.fixture
def kv_store(tmp_path: Path) -> Generator[KeyValueStore, None, None]:
    """临时数据库上的键值存储."""
    store = open_store(tmp_path / "data.db")
    yield store
    store._db.close()


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """隔离应用数据目录、环境变量与配置单例."""
    data_dir = tmp_path / "app-data"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(constants, "APP_DATA_DIR", data_dir)
    monkeypatch.setattr(config_manager, "USER_CONFIG_FILE", data_dir / "config.json")
    monkeypatch.setattr(ConfigManager, "_instance", None)
    monkeypatch.setenv("DATABASE_PATH", str(data_dir / "data.db"))
    for name in ("API_KEY", "AI_PROVIDER", "API_BASE_URL", "LOG_LEVEL", "HISTORY_CAPACITY"):
        monkeypatch.delenv(name, raising=False)
    return data_dir
