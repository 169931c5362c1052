"""应用初始化和管理."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from poster_studio.utils.logger import set_log_level, setup_logger

if TYPE_CHECKING:
    from poster_studio.services.database_service import DatabaseService
    from poster_studio.services.kv_store import KeyValueStore
    from poster_studio.services.poster_service import PosterService
    from poster_studio.ui.main_window import MainWindow

logger = setup_logger(__name__)


class Application:
    """应用管理类.

    负责加载配置、打开本地存储并组装工作流服务与主窗口。
    """

    def __init__(self) -> None:
        self._main_window: Optional["MainWindow"] = None
        self._db_service: Optional["DatabaseService"] = None
        self._store: Optional["KeyValueStore"] = None
        self._service: Optional["PosterService"] = None
        self._initialized = False

    def initialize(self) -> None:
        """初始化应用.

        执行以下初始化步骤:
        1. 确保应用数据目录存在
        2. 加载配置并设置日志级别
        3. 打开本地存储
        4. 创建工作流服务
        """
        if self._initialized:
            logger.warning("应用已初始化，跳过重复初始化")
            return

        logger.info("开始初始化应用...")

        from poster_studio.core.compositor import Compositor
        from poster_studio.core.config_manager import get_config
        from poster_studio.core.history_cache import HistoryCache
        from poster_studio.services.ai_service import PosterAIService
        from poster_studio.services.database_service import DatabaseService
        from poster_studio.services.kv_store import KeyValueStore
        from poster_studio.services.poster_service import PosterService
        from poster_studio.utils.constants import APP_DATA_DIR

        APP_DATA_DIR.mkdir(parents=True, exist_ok=True)

        config = get_config()
        settings = config.settings
        set_log_level(settings.log_level)
        if not settings.api_key:
            logger.warning("未配置 API_KEY，AI 识别将使用默认结果，风格转换不可用")

        self._db_service = DatabaseService(settings.db_path)
        self._store = KeyValueStore(self._db_service)

        self._service = PosterService(
            ai_service=PosterAIService(config.api_config),
            history=HistoryCache(self._store, settings.history_capacity),
            compositor=Compositor(settings.focus_inner_radius, settings.focus_outer_radius),
        )

        self._initialized = True
        logger.info("应用初始化完成")

    def show_main_window(self) -> None:
        """显示主窗口."""
        from poster_studio.ui.main_window import MainWindow

        if self._service is None:
            raise RuntimeError("应用尚未初始化")

        if self._main_window is None:
            self._main_window = MainWindow(self._service, self._store)

        self._main_window.show()
        self._main_window.show_tutorial_if_needed()
        logger.info("主窗口已显示")

    def cleanup(self) -> None:
        """清理应用资源."""
        logger.info("开始清理应用资源...")
        if self._db_service:
            self._db_service.close()
        logger.info("应用资源清理完成")

    @property
    def is_initialized(self) -> bool:
        """返回应用是否已初始化."""
        return self._initialized

    @property
    def service(self) -> Optional["PosterService"]:
        """返回工作流服务."""
        return self._service
