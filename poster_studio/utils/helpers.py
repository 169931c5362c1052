"""辅助函数模块."""

from __future__ import annotations

import time
import uuid


def generate_short_id(length: int = 8) -> str:
    """生成短 ID.

    Args:
        length: ID 长度

    Returns:
        短 ID 字符串
    """
    return uuid.uuid4().hex[:length]


def now_ms() -> int:
    """当前时间戳（毫秒）."""
    return int(time.time() * 1000)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """限制数值范围.

    Args:
        value: 输入值
        min_val: 最小值
        max_val: 最大值

    Returns:
        限制后的值
    """
    return max(min_val, min(value, max_val))


def hex_to_rgba(color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    """解析颜色字符串.

    支持 ``#rgb``、``#rrggbb``、``#rrggbbaa`` 以及 ``rgba(r,g,b,a)`` 形式，
    rgba 中的 a 为 0-1 小数。

    Raises:
        ValueError: 无法识别的颜色格式
    """
    color = color.strip()
    if color.startswith("rgba(") or color.startswith("rgb("):
        parts = [p.strip() for p in color[color.index("(") + 1:-1].split(",")]
        r, g, b = (int(float(p)) for p in parts[:3])
        a = round(float(parts[3]) * 255) if len(parts) > 3 else alpha
        return (r, g, b, a)

    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    if len(value) not in (6, 8):
        raise ValueError(f"无效的颜色值: {color}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    a = int(value[6:8], 16) if len(value) == 8 else alpha
    return (r, g, b, a)
