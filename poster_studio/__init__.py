"""AI 海报设计工具."""

__version__ = "1.0.0"
