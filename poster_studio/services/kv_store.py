"""键值存储服务.

在 SQLite 的 ``key_values`` 表上提供字符串键值读写，值以 JSON 序列化保存。

保存的键:
    - ``poster_history``: 最近的成品历史（JSON 列表）
    - ``tutorial_shown``: 新手引导是否已展示（布尔值）
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from poster_studio.models.database import KeyValueRecord
from poster_studio.services.database_service import DatabaseService
from poster_studio.utils.constants import TUTORIAL_STORAGE_KEY
from poster_studio.utils.exceptions import PersistenceError
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class KeyValueStore:
    """JSON 键值存储.

    所有数据库错误都转换为 :class:`PersistenceError`。

    Example:
        >>> store = KeyValueStore(DatabaseService(tmp_path / "data.db"))
        >>> store.set("tutorial_shown", True)
        >>> store.get("tutorial_shown")
        True
    """

    def __init__(self, database: DatabaseService) -> None:
        self._db = database
        self._db.init_db()

    def get(self, key: str, default: Any = None) -> Any:
        """读取并反序列化一个键.

        Raises:
            PersistenceError: 读取失败或数据不是合法 JSON
        """
        try:
            with self._db.get_session() as session:
                record = session.get(KeyValueRecord, key)
                if record is None or record.value is None:
                    return default
                raw = record.value
        except SQLAlchemyError as e:
            raise PersistenceError(f"读取 {key} 失败: {e}") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"{key} 数据已损坏: {e}") from e

    def set(self, key: str, value: Any) -> None:
        """序列化并写入一个键（覆盖旧值）.

        Raises:
            PersistenceError: 写入失败
        """
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"{key} 无法序列化: {e}") from e

        try:
            with self._db.get_session() as session:
                record = session.get(KeyValueRecord, key)
                if record is None:
                    session.add(KeyValueRecord(key=key, value=payload))
                else:
                    record.value = payload
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"写入 {key} 失败: {e}") from e
        logger.debug(f"已保存: {key} ({len(payload)} 字节)")

    def delete(self, key: str) -> None:
        """删除一个键.

        Raises:
            PersistenceError: 删除失败
        """
        try:
            with self._db.get_session() as session:
                record = session.get(KeyValueRecord, key)
                if record is not None:
                    session.delete(record)
                    session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"删除 {key} 失败: {e}") from e

    # ========================
    # 新手引导
    # ========================

    def is_tutorial_shown(self) -> bool:
        """新手引导是否已展示过（读取失败视为未展示）."""
        try:
            return bool(self.get(TUTORIAL_STORAGE_KEY, False))
        except PersistenceError as e:
            logger.warning(f"读取引导标记失败: {e}")
            return False

    def mark_tutorial_shown(self, shown: bool = True) -> None:
        """记录新手引导已展示."""
        try:
            self.set(TUTORIAL_STORAGE_KEY, shown)
        except PersistenceError as e:
            logger.warning(f"保存引导标记失败: {e}")


def open_store(db_path: Optional[Path] = None) -> KeyValueStore:
    """按路径打开键值存储."""
    return KeyValueStore(DatabaseService(db_path))
