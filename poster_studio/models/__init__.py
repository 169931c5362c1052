"""数据模型模块."""

from poster_studio.models.adjustments import (
    # 枚举
    AspectRatio,
    ElementType,
    TextStyle,
    # 常量
    TEXT_STYLE_LABELS,
    # 模型
    Adjustments,
    PosterText,
    Sticker,
)
from poster_studio.models.analysis import (
    AnalysisResult,
    EntityModification,
    TextReplacement,
)
from poster_studio.models.api_config import AIProviderType, APIConfig
from poster_studio.models.history import HistoryItem
from poster_studio.models.style_option import (
    CUSTOM_STYLE,
    STYLE_OPTIONS,
    ArtStyle,
    StyleOption,
    get_style_option,
)

__all__ = [
    # 枚举
    "AspectRatio",
    "ElementType",
    "TextStyle",
    "ArtStyle",
    "AIProviderType",
    # 常量
    "TEXT_STYLE_LABELS",
    "STYLE_OPTIONS",
    "CUSTOM_STYLE",
    # 模型
    "Adjustments",
    "PosterText",
    "Sticker",
    "HistoryItem",
    "StyleOption",
    "TextReplacement",
    "EntityModification",
    "AnalysisResult",
    "APIConfig",
    # 辅助函数
    "get_style_option",
]
