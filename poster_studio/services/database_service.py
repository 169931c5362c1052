"""数据库服务模块."""

from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from poster_studio.models.database import Base
from poster_studio.utils.constants import DATABASE_PATH
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class DatabaseService:
    """数据库服务.

    管理本地 SQLite 数据库的引擎与会话。

    Attributes:
        db_path: 数据库文件路径
        engine: SQLAlchemy 引擎
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """初始化数据库服务.

        Args:
            db_path: 数据库文件路径，默认 ~/.poster-studio/data.db
        """
        self.db_path = Path(db_path) if db_path else DATABASE_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
        )

        logger.debug(f"数据库服务初始化完成: {self.db_path}")

    def init_db(self) -> None:
        """创建表结构（已存在则跳过）."""
        Base.metadata.create_all(self.engine)
        logger.info("数据库表初始化完成")

    def get_session(self) -> Session:
        """获取数据库会话."""
        return self.SessionLocal()

    def close(self) -> None:
        """释放连接池."""
        self.engine.dispose()
        logger.debug("数据库连接已关闭")

    def __enter__(self) -> "DatabaseService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
