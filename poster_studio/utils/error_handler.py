"""错误处理工具模块.

提供统一的错误处理机制和用户友好的错误消息。

传播策略：
    - 可恢复的本地问题（识别失败、持久化失败）在源头吸收，只记录日志
    - 令用户拿不到结果的问题（图片加载、风格转换）向用户展示
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, TypeVar

from poster_studio.utils.exceptions import (
    APIKeyNotFoundError,
    APITimeoutError,
    AppException,
    ConfigError,
    ImageLoadError,
    PersistenceError,
    RemoteCallError,
    UserInputError,
)
from poster_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

T = TypeVar("T")


# 错误消息映射（按顺序匹配，子类在前）
ERROR_MESSAGES = {
    APIKeyNotFoundError: "请先配置 API 密钥",
    APITimeoutError: "网络请求超时，请检查网络连接后重试",
    ImageLoadError: "处理图片失败",
    ConfigError: "配置错误，请检查配置文件",
    PersistenceError: "历史记录保存失败",
}


def get_user_friendly_message(exception: Exception) -> str:
    """获取用户友好的错误消息.

    Args:
        exception: 异常对象

    Returns:
        用户友好的错误消息
    """
    for exc_type, message in ERROR_MESSAGES.items():
        if isinstance(exception, exc_type):
            return message

    # 风格转换失败与用户输入错误直接展示原始消息
    if isinstance(exception, (RemoteCallError, UserInputError)):
        return exception.message or "转换失败，请重试"

    if isinstance(exception, AppException):
        return exception.message

    return "转换失败，请重试"


def get_error_details(exception: Exception) -> dict[str, Any]:
    """获取错误详细信息.

    Args:
        exception: 异常对象

    Returns:
        包含错误详情的字典
    """
    details = {
        "type": type(exception).__name__,
        "message": str(exception),
        "user_message": get_user_friendly_message(exception),
    }

    if isinstance(exception, AppException):
        details["code"] = exception.code

    return details


async def safe_execute_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    default: Optional[T] = None,
    on_error: Optional[Callable[[Exception], None]] = None,
    **kwargs: Any,
) -> Optional[T]:
    """安全执行异步函数，捕获异常.

    Args:
        func: 要执行的异步函数
        *args: 位置参数
        default: 发生异常时的默认返回值
        on_error: 错误回调函数
        **kwargs: 关键字参数

    Returns:
        函数返回值或默认值
    """
    try:
        return await func(*args, **kwargs)
    except Exception as e:
        logger.warning(f"异步函数 {getattr(func, '__name__', func)} 执行失败: {e}")
        if on_error:
            on_error(e)
        return default
