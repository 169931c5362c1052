"""服务层模块."""

from poster_studio.services.ai_service import PosterAIService, build_prompt
from poster_studio.services.database_service import DatabaseService
from poster_studio.services.kv_store import KeyValueStore, open_store
from poster_studio.services.poster_service import PosterService, export_filename

__all__ = [
    # AI 服务
    "PosterAIService",
    "build_prompt",
    # 持久化
    "DatabaseService",
    "KeyValueStore",
    "open_store",
    # 工作流
    "PosterService",
    "export_filename",
]
