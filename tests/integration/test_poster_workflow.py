"""海报工作流集成测试.

从加载源图、编辑、分析、风格转换到导出，使用真实的合成器与 SQLite 存储，
只替换远程 AI 提供者。
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from poster_studio.app import Application
from poster_studio.core.history_cache import HistoryCache
from poster_studio.models.adjustments import AspectRatio, ElementType, TextStyle
from poster_studio.models.style_option import get_style_option
from poster_studio.services.ai_service import PosterAIService
from poster_studio.services.kv_store import KeyValueStore
from poster_studio.services.poster_service import PosterService
from poster_studio.ui.async_worker import AsyncTaskThread
from poster_studio.utils.exceptions import RemoteCallError


def _size(data: bytes) -> tuple[int, int]:
    return Image.open(io.BytesIO(data)).size


# ===================
# 完整流程测试
# ===================
class TestPosterWorkflow:
    """测试完整工作流."""

    @pytest.mark.asyncio
    async def test_full_flow(
        self,
        fake_provider,
        kv_store: KeyValueStore,
        png_factory,
        tmp_path: Path,
    ) -> None:
        fake_provider.texts = ["GRAND OPENING"]
        fake_provider.entities = ["Person", "Building"]
        service = PosterService(PosterAIService(provider=fake_provider), HistoryCache(kv_store))

        # 编辑：裁剪、旋转、文字、贴纸、拖拽
        service.load_image(png_factory((1200, 800)))
        session = service.session
        session.set_aspect_ratio(AspectRatio.SQUARE)
        session.rotate()
        text = session.add_text("盛大开业", TextStyle.BOLD)
        session.add_sticker("🎉")
        session.move_element(text.id, ElementType.TEXT, 50, 20)

        processed = service.apply_edits()
        assert _size(processed) == (800, 800)

        # 分析并填写替换
        analysis = await service.analyze()
        assert [tr.original for tr in analysis.text_replacements] == ["GRAND OPENING"]
        service.set_text_replacement(0, "隆重开业")
        service.set_entity_instruction(1, "turn it into a pagoda")

        # 转换并记录历史
        style = get_style_option("chinese")
        result = await service.transform(style)
        prompt = fake_provider.prompts[-1]
        assert prompt.startswith(style.prompt)
        assert "隆重开业" in prompt
        assert "Modify the Building: turn it into a pagoda." in prompt

        # 历史在重新打开存储后仍在
        reloaded = HistoryCache(kv_store)
        assert [item.style for item in reloaded.items] == [style.label]
        assert reloaded.restore(reloaded.items[0]) == result

        # 导出
        path = service.download(tmp_path / "exports")
        assert path.read_bytes() == result

    @pytest.mark.asyncio
    async def test_failed_transform_keeps_history(
        self, fake_provider, kv_store: KeyValueStore, sample_png: bytes
    ) -> None:
        """转换失败时历史不变，之后仍可重试成功."""
        service = PosterService(PosterAIService(provider=fake_provider), HistoryCache(kv_store))
        service.load_image(sample_png)
        await service.transform()

        fake_provider.result = RemoteCallError("转换失败: quota")
        with pytest.raises(RemoteCallError):
            await service.transform()
        assert len(service.history.items) == 1

        fake_provider.result = sample_png
        await service.transform()
        assert len(HistoryCache(kv_store).items) == 2

    @pytest.mark.asyncio
    async def test_history_capacity_across_sessions(
        self, fake_provider, kv_store: KeyValueStore, sample_png: bytes
    ) -> None:
        """容量限制在多次会话之间保持."""
        for _ in range(2):
            service = PosterService(
                PosterAIService(provider=fake_provider), HistoryCache(kv_store)
            )
            service.load_image(sample_png)
            for _ in range(3):
                await service.transform()
        assert len(HistoryCache(kv_store).items) == 5


# ===================
# 应用组装测试
# ===================
class TestApplication:
    """测试应用初始化."""

    def test_initialize(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HISTORY_CAPACITY", "3")
        app = Application()
        app.initialize()
        try:
            assert app.is_initialized
            assert app.service is not None
            assert app.service.history.capacity == 3
            assert (isolated_env / "data.db").exists()
            assert not app.service.ai_service.config.has_api_key
        finally:
            app.cleanup()

    def test_initialize_twice(self, isolated_env: Path) -> None:
        app = Application()
        app.initialize()
        service = app.service
        app.initialize()
        assert app.service is service
        app.cleanup()

    def test_show_before_initialize(self) -> None:
        with pytest.raises(RuntimeError):
            Application().show_main_window()


# ===================
# 后台任务测试
# ===================
class TestAsyncTaskThread:
    """测试后台协程线程."""

    def test_success_signal(self, qtbot) -> None:
        async def work() -> int:
            return 42

        thread = AsyncTaskThread(work, "test")
        with qtbot.waitSignal(thread.succeeded, timeout=5000) as blocker:
            thread.start()
        thread.wait()
        assert blocker.args == [42]

    def test_failure_signal(self, qtbot) -> None:
        async def work() -> None:
            raise RemoteCallError("boom")

        thread = AsyncTaskThread(work, "test")
        with qtbot.waitSignal(thread.failed, timeout=5000) as blocker:
            thread.start()
        thread.wait()
        assert isinstance(blocker.args[0], RemoteCallError)

    def test_runs_service_call(self, qtbot, fake_provider, sample_png: bytes) -> None:
        """在工作线程中运行风格转换."""
        service = PosterService(PosterAIService(provider=fake_provider), HistoryCache())
        service.load_image(sample_png)

        thread = AsyncTaskThread(service.transform, "transform")
        with qtbot.waitSignal(thread.succeeded, timeout=5000) as blocker:
            thread.start()
        thread.wait()
        assert blocker.args[0] == fake_provider.result
        assert len(service.history.items) == 1
