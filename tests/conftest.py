"""Pytest 配置和共享 fixtures."""

from __future__ import annotations

import asyncio
import io
import os
from typing import Callable, Optional

# Qt 测试在无显示环境下运行
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PIL import Image

from poster_studio.services.ai_providers.base import BaseAIProvider


def make_png(
    size: tuple[int, int] = (400, 300),
    color: tuple[int, int, int, int] = (200, 120, 60, 255),
) -> bytes:
    """生成纯色 PNG."""
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeProvider(BaseAIProvider):
    """可编程的测试提供者.

    Attributes:
        texts: detect_text 返回值，为异常时抛出
        entities: detect_entities 返回值，为异常时抛出
        result: edit_image 返回值，为异常时抛出
        gate: 设置后 edit_image 会等待该事件
    """

    def __init__(self) -> None:
        super().__init__(api_key="test-key")
        self.texts: list[str] | Exception = []
        self.entities: list[str] | Exception = []
        self.result: bytes | Exception = make_png((64, 64), (0, 255, 0, 255))
        self.gate: Optional[asyncio.Event] = None
        self.prompts: list[str] = []
        self.closed = 0

    @property
    def default_text_model(self) -> str:
        return "fake-text"

    @property
    def default_image_model(self) -> str:
        return "fake-image"

    async def detect_text(self, image: bytes, mime_type: str) -> list[str]:
        if isinstance(self.texts, Exception):
            raise self.texts
        return list(self.texts)

    async def detect_entities(self, image: bytes, mime_type: str) -> list[str]:
        if isinstance(self.entities, Exception):
            raise self.entities
        return list(self.entities)

    async def edit_image(self, image: bytes, mime_type: str, prompt: str) -> bytes:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    async def close(self) -> None:
        self.closed += 1


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    """返回 PNG 生成函数."""
    return make_png


@pytest.fixture
def sample_png() -> bytes:
    """400x300 的纯色 PNG."""
    return make_png()


@pytest.fixture
def fake_provider() -> FakeProvider:
    """返回可编程的测试提供者."""
    return FakeProvider()


class MemoryStore:
    """内存键值存储."""

    def __init__(self) -> None:
        self.data: dict = {}

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, value) -> None:
        self.data[key] = value


@pytest.fixture
def memory_store() -> MemoryStore:
    """返回内存键值存储."""
    return MemoryStore()
