"""应用常量定义."""

from pathlib import Path

# ===================
# 应用信息
# ===================
APP_NAME = "设计风格迁移 AI"
APP_VERSION = "1.0.0"

# ===================
# 路径常量
# ===================
# 应用数据目录
APP_DATA_DIR = Path.home() / ".poster-studio"

# 数据库文件路径
DATABASE_PATH = APP_DATA_DIR / "data.db"

# 日志目录
LOG_DIR = APP_DATA_DIR / "logs"

# ===================
# 调整参数范围
# ===================
NEUTRAL_PERCENT = 100
MIN_PERCENT = 0
MAX_PERCENT = 200

MIN_BLUR = 0
MAX_BLUR = 20

ROTATION_STEP = 90

# 拖拽坐标范围（百分比，允许略微拖出画布边缘）
POSITION_MIN = -10.0
POSITION_MAX = 110.0

# ===================
# 景深（焦点）遮罩
# ===================
DEFAULT_FOCUS_INNER_RADIUS = 0.2
DEFAULT_FOCUS_OUTER_RADIUS = 0.7

# ===================
# 文字/贴纸
# ===================
DEFAULT_TEXT_CONTENT = "新文本"
DEFAULT_STICKER = "✨"

# 文字基准字号 = 画布宽度 / TEXT_SIZE_DIVISOR * 字号缩放
# 合成与预览共用
TEXT_SIZE_DIVISOR = 15
# 贴纸基准尺寸 = 画布宽度 / STICKER_SIZE_DIVISOR * 缩放
STICKER_SIZE_DIVISOR = 8
# 竖排文字行距系数
VERTICAL_ADVANCE = 1.1

# ===================
# 历史记录
# ===================
HISTORY_CAPACITY = 5
HISTORY_STORAGE_KEY = "poster_history"
TUTORIAL_STORAGE_KEY = "tutorial_shown"

# ===================
# 导出
# ===================
EXPORT_PREFIX = "ai-poster"
EXPORT_FORMAT = "PNG"

# ===================
# API 设置
# ===================
DEFAULT_OPENAI_BASE = "https://api.openai.com/v1"
API_TIMEOUT = 120  # 秒

# 识别失败时的主体兜底
FALLBACK_ENTITIES = ("Person", "Background")

# 贴纸面板中的预设 Emoji
STICKER_PRESETS = ("✨", "❤️", "🔥", "⭐", "🎉", "🌸", "👑", "💥")
