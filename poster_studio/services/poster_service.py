"""海报工作流服务.

串联编辑会话、合成器、AI 服务与历史缓存：

    加载源图 → 编辑 → 应用（扁平化）→ 分析 → 风格转换 → 记录历史 → 导出
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from poster_studio.core.compositor import Compositor
from poster_studio.core.editor_session import EditorSession
from poster_studio.core.history_cache import HistoryCache
from poster_studio.models.analysis import AnalysisResult
from poster_studio.models.history import HistoryItem
from poster_studio.models.style_option import STYLE_OPTIONS, StyleOption
from poster_studio.services.ai_service import PosterAIService
from poster_studio.utils.constants import EXPORT_FORMAT, EXPORT_PREFIX
from poster_studio.utils.exceptions import UserInputError
from poster_studio.utils.helpers import now_ms
from poster_studio.utils.image_utils import ImageSource, image_to_bytes
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


def export_filename(timestamp: Optional[int] = None) -> str:
    """导出文件名: ``ai-poster-<毫秒时间戳>.png``."""
    stamp = timestamp if timestamp is not None else now_ms()
    return f"{EXPORT_PREFIX}-{stamp}.{EXPORT_FORMAT.lower()}"


class PosterService:
    """海报工作流.

    Attributes:
        session: 编辑会话
        compositor: 合成器
        ai_service: AI 服务
        history: 成品历史
        processed_image: 最近一次应用编辑后的扁平图片
        transformed_image: 最近一次风格转换的结果
        analysis: 最近一次分析结果
        selected_style: 当前选择的风格
        custom_prompt: 自定义风格描述

    Example:
        >>> service = PosterService(ai_service=PosterAIService(config))
        >>> await service.load_image(path)
        >>> service.session.add_text("限时特惠")
        >>> await service.apply_edits()
        >>> result = await service.transform()
        >>> service.download(Path("~/Pictures").expanduser())
    """

    def __init__(
        self,
        ai_service: PosterAIService,
        history: Optional[HistoryCache] = None,
        compositor: Optional[Compositor] = None,
        session: Optional[EditorSession] = None,
    ) -> None:
        self.ai_service = ai_service
        self.history = history if history is not None else HistoryCache()
        self.compositor = compositor or Compositor()
        self.session = session or EditorSession()

        self.processed_image: Optional[bytes] = None
        self.transformed_image: Optional[bytes] = None
        self.analysis = AnalysisResult()
        self.selected_style: StyleOption = STYLE_OPTIONS[0]
        self.custom_prompt = ""

        self._is_transforming = False
        self._is_analyzing = False

    @property
    def is_transforming(self) -> bool:
        """是否有风格转换正在进行."""
        return self._is_transforming

    @property
    def is_analyzing(self) -> bool:
        """是否正在分析."""
        return self._is_analyzing

    # ========================
    # 源图
    # ========================

    def load_image(self, source: ImageSource) -> bytes:
        """加载新的源图，清空之前的结果.

        Returns:
            源图 PNG 字节，可直接用于 :meth:`analyze`

        Raises:
            ImageLoadError: 图片无法解码
        """
        self.session.load_source(source)
        self.processed_image = image_to_bytes(self.session.source)
        self.transformed_image = None
        self.analysis = AnalysisResult()
        return self.processed_image

    def restore_history(self, item: HistoryItem) -> bytes:
        """以历史成品作为新的源图（原调整参数不会恢复）."""
        logger.info(f"恢复历史记录: {item.id}")
        return self.load_image(self.history.restore(item))

    def reset(self) -> None:
        """清空全部状态."""
        self.session.reset()
        self.processed_image = None
        self.transformed_image = None
        self.analysis = AnalysisResult()
        self.custom_prompt = ""

    # ========================
    # 编辑与分析
    # ========================

    def apply_edits(self) -> bytes:
        """将当前调整扁平化为新的待转换图片.

        Raises:
            UserInputError: 尚未加载源图
            ImageLoadError: 源图无法解码
        """
        self.processed_image = self.session.apply(self.compositor)
        self.transformed_image = None
        logger.info(f"已应用编辑: {len(self.processed_image)} bytes")
        return self.processed_image

    async def analyze(self) -> AnalysisResult:
        """分析当前待转换图片中的文字与主体.

        识别失败不会抛出异常。
        """
        if self.processed_image is None:
            return self.analysis

        self._is_analyzing = True
        try:
            self.analysis = await self.ai_service.analyze(self.processed_image)
        finally:
            self._is_analyzing = False
        return self.analysis

    def set_text_replacement(self, index: int, replacement: str) -> None:
        """修改第 index 条识别文字的替换内容."""
        self.analysis.text_replacements[index].replacement = replacement

    def set_entity_instruction(self, index: int, instruction: str) -> None:
        """修改第 index 个主体的改造指令."""
        self.analysis.entity_modifications[index].instruction = instruction

    # ========================
    # 风格转换
    # ========================

    async def transform(
        self,
        style: Optional[StyleOption] = None,
        custom_prompt: Optional[str] = None,
    ) -> bytes:
        """对当前待转换图片执行风格转换并记录历史.

        Raises:
            UserInputError: 没有图片，或已有转换在进行
            RemoteCallError: 远程调用失败
        """
        if self.processed_image is None:
            raise UserInputError("请先上传一张图片")
        if self._is_transforming:
            raise UserInputError("正在转换中，请稍候")

        if style is not None:
            self.selected_style = style
        if custom_prompt is not None:
            self.custom_prompt = custom_prompt

        self._is_transforming = True
        try:
            result = await self.ai_service.transform_style(
                self.processed_image,
                self.selected_style,
                self.custom_prompt,
                self.analysis.text_replacements,
                self.analysis.entity_modifications,
            )
        finally:
            self._is_transforming = False

        self.transformed_image = result
        self.history.record(result, self.selected_style.label)
        return result

    # ========================
    # 导出
    # ========================

    def download(self, directory: Path) -> Path:
        """将风格转换结果保存为 PNG 文件.

        Args:
            directory: 保存目录

        Returns:
            保存的文件路径

        Raises:
            UserInputError: 还没有转换结果
        """
        if self.transformed_image is None:
            raise UserInputError("还没有可下载的结果")

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / export_filename()
        path.write_bytes(self.transformed_image)
        logger.info(f"已导出: {path}")
        return path
