"""海报工作流服务单元测试."""

from __future__ import annotations

import asyncio
import io
from pathlib import Path

import pytest
from PIL import Image

from poster_studio.core.history_cache import HistoryCache
from poster_studio.models.style_option import CUSTOM_STYLE, get_style_option
from poster_studio.services.ai_service import PosterAIService
from poster_studio.services.poster_service import PosterService, export_filename
from poster_studio.utils.exceptions import APIRequestError, ImageLoadError, UserInputError


@pytest.fixture
def service(fake_provider) -> PosterService:
    """使用测试提供者的工作流服务."""
    return PosterService(PosterAIService(provider=fake_provider), HistoryCache())


# ===================
# 导出文件名测试
# ===================
class TestExportFilename:
    """测试导出文件名."""

    def test_with_timestamp(self) -> None:
        assert export_filename(1700000000000) == "ai-poster-1700000000000.png"

    def test_default_timestamp(self) -> None:
        name = export_filename()
        assert name.startswith("ai-poster-")
        assert name.endswith(".png")


# ===================
# 源图与编辑测试
# ===================
class TestLoadAndApply:
    """测试加载与应用编辑."""

    def test_load_image(self, service: PosterService, sample_png: bytes) -> None:
        """加载后得到待转换图片."""
        processed = service.load_image(sample_png)
        assert processed.startswith(b"\x89PNG")
        assert service.processed_image == processed
        assert service.transformed_image is None

    def test_load_invalid(self, service: PosterService) -> None:
        with pytest.raises(ImageLoadError):
            service.load_image(b"nope")

    def test_apply_edits(self, service: PosterService, sample_png: bytes) -> None:
        """应用编辑后待转换图片为合成结果."""
        service.load_image(sample_png)
        service.session.rotate()
        processed = service.apply_edits()
        assert Image.open(io.BytesIO(processed)).size == (300, 400)

    def test_apply_without_image(self, service: PosterService) -> None:
        with pytest.raises(UserInputError):
            service.apply_edits()

    def test_reset(self, service: PosterService, sample_png: bytes) -> None:
        service.load_image(sample_png)
        service.custom_prompt = "x"
        service.reset()
        assert service.processed_image is None
        assert service.custom_prompt == ""
        assert not service.session.has_source


# ===================
# 分析测试
# ===================
class TestAnalyze:
    """测试分析与编辑分析结果."""

    @pytest.mark.asyncio
    async def test_analyze_without_image(self, service: PosterService) -> None:
        """没有图片时返回空结果."""
        result = await service.analyze()
        assert result.text_replacements == []

    @pytest.mark.asyncio
    async def test_analyze_and_edit(
        self, service: PosterService, fake_provider, sample_png: bytes
    ) -> None:
        fake_provider.texts = ["SALE"]
        fake_provider.entities = ["Dog"]
        service.load_image(sample_png)
        await service.analyze()
        assert not service.is_analyzing

        service.set_text_replacement(0, "特惠")
        service.set_entity_instruction(0, "make it a cat")
        await service.transform()

        prompt = fake_provider.prompts[-1]
        assert 'Change the text that says "SALE" to "特惠".' in prompt
        assert "Modify the Dog: make it a cat." in prompt

    def test_edit_out_of_range(self, service: PosterService) -> None:
        with pytest.raises(IndexError):
            service.set_text_replacement(3, "x")


# ===================
# 风格转换测试
# ===================
class TestTransform:
    """测试风格转换与历史."""

    @pytest.mark.asyncio
    async def test_requires_image(self, service: PosterService) -> None:
        with pytest.raises(UserInputError):
            await service.transform()

    @pytest.mark.asyncio
    async def test_records_history(
        self, service: PosterService, fake_provider, sample_png: bytes
    ) -> None:
        """成功后记录历史."""
        service.load_image(sample_png)
        style = get_style_option("cyberpunk")
        result = await service.transform(style)
        assert service.transformed_image == result
        assert service.history.items[0].style == style.label
        assert service.history.restore(service.history.items[0]) == result

    @pytest.mark.asyncio
    async def test_failure_keeps_state(
        self, service: PosterService, fake_provider, sample_png: bytes
    ) -> None:
        """失败时不记录历史并恢复可转换状态."""
        fake_provider.result = APIRequestError("quota", 429)
        service.load_image(sample_png)
        with pytest.raises(APIRequestError):
            await service.transform()
        assert not service.is_transforming
        assert service.history.items == []
        assert service.transformed_image is None

    @pytest.mark.asyncio
    async def test_concurrent_transform_rejected(
        self, service: PosterService, fake_provider, sample_png: bytes
    ) -> None:
        """转换进行中时再次请求被拒绝."""
        fake_provider.gate = asyncio.Event()
        service.load_image(sample_png)

        first = asyncio.create_task(service.transform())
        await asyncio.sleep(0)
        assert service.is_transforming
        with pytest.raises(UserInputError):
            await service.transform()

        fake_provider.gate.set()
        await first
        assert len(service.history.items) == 1

    @pytest.mark.asyncio
    async def test_custom_style(
        self, service: PosterService, fake_provider, sample_png: bytes
    ) -> None:
        service.load_image(sample_png)
        await service.transform(CUSTOM_STYLE, "low-poly art")
        assert fake_provider.prompts == ["low-poly art"]
        assert service.history.items[0].style == CUSTOM_STYLE.label


# ===================
# 历史与导出测试
# ===================
class TestHistoryAndDownload:
    """测试恢复与导出."""

    @pytest.mark.asyncio
    async def test_restore_history(self, service: PosterService, sample_png: bytes) -> None:
        """恢复历史作为新的源图，调整参数被重置."""
        service.load_image(sample_png)
        result = await service.transform()
        service.session.rotate()

        service.restore_history(service.history.items[0])
        assert service.session.adjustments.rotation == 0
        assert service.transformed_image is None
        assert Image.open(io.BytesIO(service.processed_image)).size == Image.open(
            io.BytesIO(result)
        ).size

    def test_download_without_result(self, service: PosterService, tmp_path: Path) -> None:
        with pytest.raises(UserInputError):
            service.download(tmp_path)

    @pytest.mark.asyncio
    async def test_download(
        self, service: PosterService, sample_png: bytes, tmp_path: Path
    ) -> None:
        service.load_image(sample_png)
        result = await service.transform()
        path = service.download(tmp_path / "out")
        assert path.name.startswith("ai-poster-")
        assert path.suffix == ".png"
        assert path.read_bytes() == result
