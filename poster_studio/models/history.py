"""历史记录数据模型."""

from __future__ import annotations

from pydantic import BaseModel, Field

from poster_studio.utils.helpers import now_ms


class HistoryItem(BaseModel):
    """一次风格转换完成后的成品记录.

    仅保存最终图片，不保存源图与调整参数。

    Attributes:
        id: 记录 ID（创建时间戳）
        image_url: 成品图片 Data URL
        style: 风格名称
        date: 创建时间（毫秒时间戳）
    """

    id: str = Field(description="记录ID")
    image_url: str = Field(description="成品图片 Data URL")
    style: str = Field(default="", description="风格名称")
    date: int = Field(default_factory=now_ms, description="创建时间（毫秒）")
