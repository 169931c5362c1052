"""成品历史缓存.

保存最近若干次风格转换的成品（默认 5 条，最新在前），并持久化到键值存储。
只保存最终图片，恢复时得到的是一张新的源图，原始调整参数不可找回。
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol

from pydantic import ValidationError

from poster_studio.models.history import HistoryItem
from poster_studio.utils.constants import HISTORY_CAPACITY, HISTORY_STORAGE_KEY
from poster_studio.utils.exceptions import PersistenceError
from poster_studio.utils.helpers import now_ms
from poster_studio.utils.image_utils import bytes_to_data_url, data_url_to_bytes
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class HistoryStore(Protocol):
    """历史记录的存储后端."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class HistoryCache:
    """有容量上限的成品历史.

    持久化失败只记录日志，内存中的列表照常更新。

    Attributes:
        capacity: 最多保留的条数

    Example:
        >>> cache = HistoryCache(store)
        >>> item = cache.record(png_bytes, "水彩艺术")
        >>> cache.items[0] is item
        True
    """

    def __init__(
        self,
        store: Optional[HistoryStore] = None,
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"历史容量必须大于 0: {capacity}")
        self.capacity = capacity
        self._store = store
        self._items: List[HistoryItem] = self._load()

    @property
    def items(self) -> List[HistoryItem]:
        """历史记录（最新在前）."""
        return list(self._items)

    def record(self, image: bytes | str, style_label: str) -> HistoryItem:
        """记录一次成品.

        Args:
            image: 成品 PNG 字节或 Data URL
            style_label: 风格名称

        Returns:
            新的历史记录
        """
        image_url = image if isinstance(image, str) else bytes_to_data_url(image)
        timestamp = now_ms()
        if self._items and timestamp <= self._items[0].date:
            # 同一毫秒内的多次记录保持 ID 唯一且递增
            timestamp = self._items[0].date + 1
        item = HistoryItem(
            id=str(timestamp),
            image_url=image_url,
            style=style_label,
            date=timestamp,
        )

        self._items = [item, *self._items][: self.capacity]
        self._persist()
        logger.info(f"已记录历史: {style_label}，共 {len(self._items)} 条")
        return item

    def restore(self, item: HistoryItem) -> bytes:
        """取出历史成品图片，作为新的源图使用."""
        return data_url_to_bytes(item.image_url)

    def get(self, item_id: str) -> Optional[HistoryItem]:
        """按 ID 查找历史记录."""
        return next((i for i in self._items if i.id == item_id), None)

    def clear(self) -> None:
        """清空历史."""
        self._items = []
        self._persist()

    def _load(self) -> List[HistoryItem]:
        if self._store is None:
            return []

        try:
            raw = self._store.get(HISTORY_STORAGE_KEY, [])
        except PersistenceError as e:
            logger.error(f"读取历史记录失败: {e}")
            return []
        except Exception:
            logger.exception("读取历史记录时存储后端异常")
            return []

        if not isinstance(raw, list):
            logger.warning("历史记录格式无效，已忽略")
            return []

        items = []
        for entry in raw:
            try:
                items.append(HistoryItem.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"跳过损坏的历史记录: {e.error_count()} 个错误")
        return items[: self.capacity]

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            self._store.set(
                HISTORY_STORAGE_KEY,
                [item.model_dump() for item in self._items],
            )
        except PersistenceError as e:
            logger.error(f"历史记录保存失败: {e}")
        except Exception:
            logger.exception("保存历史记录时存储后端异常")
