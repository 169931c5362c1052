"""文字排版预设与字体查找.

样式标签到排版参数的查找表，custom 样式改为读取图层自身的覆盖字段。
文字绘制拆分为有序的绘制步骤（发光 → 描边/阴影 → 填充），便于独立验证。
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from PIL import ImageFont

from poster_studio.models.adjustments import PosterText, TextStyle
from poster_studio.utils.constants import TEXT_SIZE_DIVISOR, VERTICAL_ADVANCE
from poster_studio.utils.helpers import hex_to_rgba
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

RGBA = tuple[int, int, int, int]


# ===================
# 常量定义
# ===================

# 字体搜索路径
FONT_SEARCH_PATHS = [
    "/System/Library/Fonts/",
    "/System/Library/Fonts/Supplemental/",
    "/Library/Fonts/",
    "~/Library/Fonts/",
    "C:/Windows/Fonts/",
    "/usr/share/fonts/",
    "/usr/share/fonts/truetype/",
    "/usr/share/fonts/truetype/dejavu/",
    "/usr/share/fonts/truetype/noto/",
]

# 通用字体族 → 候选字体文件
GENERIC_FAMILIES: dict[str, list[str]] = {
    "sans-serif": ["Arial.ttf", "Helvetica.ttc", "DejaVuSans.ttf", "LiberationSans-Regular.ttf"],
    "serif": ["Times New Roman.ttf", "Times.ttc", "DejaVuSerif.ttf", "LiberationSerif-Regular.ttf"],
    "cursive": ["Brush Script.ttf", "Comic Sans MS.ttf", "comic.ttf", "DejaVuSans.ttf"],
    "kaiti": ["Kaiti.ttc", "STKaiti.ttf", "simkai.ttf", "AR PL UKai CN.ttf"],
    "arial black": ["Arial Black.ttf", "ariblk.ttf", "DejaVuSans-Bold.ttf"],
}

# 中文字体回退列表
CHINESE_FONT_FALLBACKS = [
    "PingFang.ttc",
    "STHeiti Medium.ttc",
    "Hiragino Sans GB.ttc",
    "msyh.ttc",
    "simhei.ttf",
    "wqy-microhei.ttc",
    "NotoSansCJK-Regular.ttc",
    "NotoSansSC-Regular.otf",
]

# 彩色 Emoji 字体（位图字体只接受固定字号）
EMOJI_FONTS = [
    ("NotoColorEmoji.ttf", 109),
    ("Apple Color Emoji.ttc", 160),
    ("seguiemj.ttf", 109),
]

DEFAULT_FONT_FAMILY = "sans-serif"


# ===================
# 字体查找
# ===================


def has_chinese_characters(text: str) -> bool:
    """检查文本是否包含中文字符."""
    return any("\u4e00" <= c <= "\u9fff" or "\u3400" <= c <= "\u4dbf" for c in text)


def _search_font_file(names: list[str], font_size: int) -> Optional[ImageFont.FreeTypeFont]:
    for search_path in FONT_SEARCH_PATHS:
        expanded_path = os.path.expanduser(search_path)
        if not os.path.isdir(expanded_path):
            continue
        for name in names:
            font_path = os.path.join(expanded_path, name)
            if os.path.exists(font_path):
                try:
                    return ImageFont.truetype(font_path, font_size)
                except OSError:
                    continue
    return None


def _default_font(font_size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.load_default(size=font_size)
    except (OSError, TypeError):
        return ImageFont.load_default()


@functools.lru_cache(maxsize=64)
def find_font(
    font_family: Optional[str],
    font_size: int,
    bold: bool = False,
    italic: bool = False,
    chinese: bool = False,
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """查找字体.

    依次尝试：中文字体（文本含中文时）、通用字体族映射、按名称直接加载、
    常用路径下的粗体/斜体变体，最后回退到 Pillow 内置字体。

    Args:
        font_family: 字体名称或通用字体族（sans-serif / serif / cursive ...）
        font_size: 字号（像素）
        bold: 是否粗体
        italic: 是否斜体
        chinese: 文本是否包含中文

    Returns:
        ImageFont 对象
    """
    font_size = max(1, font_size)

    if chinese:
        chinese_font = _search_font_file(CHINESE_FONT_FALLBACKS, font_size)
        if chinese_font:
            return chinese_font

    family = (font_family or DEFAULT_FONT_FAMILY).strip().strip('"')
    generic = GENERIC_FAMILIES.get(family.lower())
    if generic:
        font = _search_font_file(generic, font_size)
        if font:
            return font
    else:
        try:
            return ImageFont.truetype(family, font_size)
        except OSError:
            pass

        variants = [family, f"{family}.ttf", f"{family}.otf", f"{family}.ttc"]
        if bold and italic:
            variants += [f"{family}-BoldItalic.ttf", f"{family} Bold Italic.ttf"]
        elif bold:
            variants += [f"{family}-Bold.ttf", f"{family} Bold.ttf"]
        elif italic:
            variants += [f"{family}-Italic.ttf", f"{family} Italic.ttf"]
        font = _search_font_file(variants, font_size)
        if font:
            return font
        logger.debug(f"字体 '{family}' 未找到，使用默认字体")

    return _default_font(font_size)


@functools.lru_cache(maxsize=4)
def find_emoji_font() -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """查找彩色 Emoji 字体，找不到时回退到普通字体."""
    for name, size in EMOJI_FONTS:
        font = _search_font_file([name], size)
        if font:
            return font
    logger.debug("未找到彩色 Emoji 字体，贴纸使用默认字体")
    return find_font(None, 109)


# ===================
# 排版预设
# ===================


@dataclass(frozen=True)
class TypographyPreset:
    """样式预设.

    字号相关的数值用相对基准字号的比例表示，其余为像素值。
    """

    font_family: str
    fill: str
    bold: bool = False
    italic: bool = False
    size_multiplier: float = 1.0
    shadow_color: Optional[str] = None
    shadow_blur: float = 0.0
    glow_color: Optional[str] = None
    glow_ratio: float = 0.0
    letter_spacing: float = 0.0
    hard_outline: bool = False
    vertical: bool = False


TYPOGRAPHY_PRESETS: dict[TextStyle, TypographyPreset] = {
    TextStyle.NEON: TypographyPreset(
        font_family="sans-serif",
        fill="#00f2ff",
        bold=True,
        glow_color="#00f2ff",
        glow_ratio=1 / 3,
    ),
    TextStyle.ELEGANT: TypographyPreset(
        font_family="serif",
        fill="#ffffff",
        italic=True,
        shadow_color="rgba(0,0,0,0.5)",
        shadow_blur=4,
        letter_spacing=4,
    ),
    TextStyle.BOLD: TypographyPreset(
        font_family="Arial Black",
        fill="#ffff00",
        bold=True,
        size_multiplier=1.2,
        shadow_color="#000000",
        hard_outline=True,
    ),
    TextStyle.TRADITIONAL: TypographyPreset(
        font_family="Kaiti",
        fill="#1a1a1a",
        bold=True,
        vertical=True,
    ),
    TextStyle.BRUSH: TypographyPreset(
        font_family="cursive",
        fill="#d63031",
        bold=True,
    ),
}

# 硬描边宽度 = 基准字号 / HARD_OUTLINE_DIVISOR，即 画布宽度 / 150 × 字号缩放。
# 描边始终是字号的十分之一，与字号同比例缩放，不受 shadow_blur 影响。
HARD_OUTLINE_DIVISOR = 10


@dataclass(frozen=True)
class ResolvedTypography:
    """解析后的排版参数（像素值与 RGBA 颜色）."""

    font_family: str
    font_size: float
    fill: RGBA
    bold: bool
    italic: bool
    shadow_color: RGBA
    shadow_blur: float
    glow_color: RGBA
    glow_size: float
    outline_width: int
    hard_outline: bool
    letter_spacing: float
    vertical: bool


def base_font_size(canvas_width: float, font_scale: float) -> float:
    """基准字号：画布宽度 / 15 × 字号缩放.

    TEXT_SIZE_DIVISOR 同时用于预览画布 (ui/poster_canvas.py)，两处字号一致，
    拖拽时看到的文字大小与导出结果相同。硬描边宽度在此基础上再除以
    HARD_OUTLINE_DIVISOR。
    """
    return canvas_width / TEXT_SIZE_DIVISOR * font_scale


def resolve_typography(text: PosterText, canvas_width: float) -> ResolvedTypography:
    """解析文字图层的排版参数.

    非 custom 样式一律查表，忽略图层上的覆盖字段；custom 样式读取覆盖字段。

    Args:
        text: 文字图层
        canvas_width: 画布宽度

    Returns:
        解析后的排版参数
    """
    base = base_font_size(canvas_width, text.font_size)

    if text.style == TextStyle.CUSTOM:
        fill = hex_to_rgba(text.color or "#ffffff")
        shadow_blur = text.shadow_blur or 0.0
        return ResolvedTypography(
            font_family=text.font_family or DEFAULT_FONT_FAMILY,
            font_size=base,
            fill=fill,
            bold=True,
            italic=False,
            shadow_color=hex_to_rgba(text.shadow_color or "#000000"),
            shadow_blur=shadow_blur,
            glow_color=hex_to_rgba(text.glow_color) if text.glow_color else fill,
            glow_size=text.glow_size or 0.0,
            outline_width=max(1, round(shadow_blur / 4)) if shadow_blur > 0 else 0,
            hard_outline=False,
            letter_spacing=0.0,
            vertical=False,
        )

    preset = TYPOGRAPHY_PRESETS[text.style]
    size = base * preset.size_multiplier
    fill = hex_to_rgba(preset.fill)

    if preset.hard_outline:
        outline_width = max(1, round(base / HARD_OUTLINE_DIVISOR))
    elif preset.shadow_blur > 0:
        outline_width = max(1, round(preset.shadow_blur / 4))
    else:
        outline_width = 0

    return ResolvedTypography(
        font_family=preset.font_family,
        font_size=size,
        fill=fill,
        bold=preset.bold,
        italic=preset.italic,
        shadow_color=hex_to_rgba(preset.shadow_color or "#000000"),
        shadow_blur=preset.shadow_blur,
        glow_color=hex_to_rgba(preset.glow_color) if preset.glow_color else fill,
        glow_size=size * preset.glow_ratio,
        outline_width=outline_width,
        hard_outline=preset.hard_outline,
        letter_spacing=preset.letter_spacing,
        vertical=preset.vertical,
    )


# ===================
# 绘制步骤
# ===================


class PassKind(str, Enum):
    """文字绘制步骤类型."""

    GLOW = "glow"
    OUTLINE = "outline"
    FILL = "fill"


@dataclass(frozen=True)
class TextPass:
    """单个绘制步骤.

    Attributes:
        kind: 步骤类型
        color: 绘制颜色
        stroke_width: 描边宽度（像素）
        blur: 绘制后施加的高斯模糊半径
    """

    kind: PassKind
    color: RGBA
    stroke_width: int = 0
    blur: float = 0.0


def plan_text_passes(typography: ResolvedTypography) -> list[TextPass]:
    """生成文字绘制步骤，顺序固定为 发光 → 描边/阴影 → 填充.

    bold 样式始终绘制硬描边，与阴影模糊设置无关。
    """
    passes: list[TextPass] = []

    if typography.glow_size > 0:
        passes.append(
            TextPass(PassKind.GLOW, typography.glow_color, blur=typography.glow_size / 2)
        )

    if typography.hard_outline:
        passes.append(
            TextPass(PassKind.OUTLINE, typography.shadow_color, typography.outline_width)
        )
    elif typography.shadow_blur > 0:
        passes.append(
            TextPass(
                PassKind.OUTLINE,
                typography.shadow_color,
                typography.outline_width,
                blur=typography.shadow_blur / 2,
            )
        )

    passes.append(TextPass(PassKind.FILL, typography.fill))
    return passes


# ===================
# 字符布局
# ===================


@dataclass(frozen=True)
class GlyphRun:
    """一段连续绘制的文字及其锚点."""

    text: str
    x: float
    y: float
    anchor: str


def layout_text(
    content: str,
    typography: ResolvedTypography,
    x: float,
    y: float,
    measure: Optional[Callable[[str], float]] = None,
) -> list[GlyphRun]:
    """计算文字各段的绘制位置.

    - 竖排：每个字符一行，以 1.1 倍字号向下推进
    - 有字间距：逐字符排布，整体水平居中
    - 其他：整行居中；多行文本按 1.2 倍字号行距上下居中

    Args:
        content: 文字内容
        typography: 排版参数
        x: 锚点 X（像素）
        y: 锚点 Y（像素）
        measure: 字符宽度测量函数，逐字符排布时必需

    Returns:
        绘制段列表
    """
    size = typography.font_size

    if typography.vertical:
        chars = [c for c in content if c != "\n"]
        return [
            GlyphRun(c, x, y + i * size * VERTICAL_ADVANCE, "mm")
            for i, c in enumerate(chars)
        ]

    lines = content.split("\n")
    line_height = size * 1.2
    top = y - (len(lines) - 1) * line_height / 2
    runs: list[GlyphRun] = []

    for index, line in enumerate(lines):
        line_y = top + index * line_height
        if not line:
            continue
        if typography.letter_spacing > 0 and measure is not None and len(line) > 1:
            widths = [measure(c) for c in line]
            total = sum(widths) + typography.letter_spacing * (len(line) - 1)
            cursor = x - total / 2
            for char, width in zip(line, widths):
                runs.append(GlyphRun(char, cursor, line_y, "lm"))
                cursor += width + typography.letter_spacing
        else:
            runs.append(GlyphRun(line, x, line_y, "mm"))

    return runs
