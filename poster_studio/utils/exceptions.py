"""自定义异常类."""

from __future__ import annotations


class AppException(Exception):
    """应用基础异常类.

    所有自定义异常都应继承此类。

    Attributes:
        message: 错误消息
        code: 错误代码
    """

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        """初始化异常.

        Args:
            message: 错误消息
            code: 错误代码
        """
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        """返回异常字符串表示."""
        return f"[{self.code}] {self.message}"


# ===================
# 配置相关异常
# ===================
class ConfigError(AppException):
    """配置错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG_ERROR")


# ===================
# 远程调用相关异常
# ===================
class RemoteCallError(AppException):
    """远程 AI 调用错误异常.

    识别类调用失败时在源头被吸收，风格转换失败时向用户展示。
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, "REMOTE_CALL_ERROR")


class APIKeyNotFoundError(RemoteCallError):
    """API 密钥未找到异常."""

    def __init__(self) -> None:
        super().__init__("API 密钥未配置，请设置 API_KEY 环境变量")


class APIRequestError(RemoteCallError):
    """API 请求错误异常."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        msg = message
        if status_code:
            msg = f"API 请求失败 (HTTP {status_code}): {message}"
        super().__init__(msg)


class APITimeoutError(RemoteCallError):
    """API 超时异常."""

    def __init__(self, timeout: int) -> None:
        super().__init__(f"API 请求超时 ({timeout}秒)")


# ===================
# 图片处理相关异常
# ===================
class ImageProcessError(AppException):
    """图片处理错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "IMAGE_PROCESS_ERROR")


class ImageLoadError(ImageProcessError):
    """源图片解码失败异常."""

    def __init__(self, reason: str = "") -> None:
        msg = "图片加载失败"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


# ===================
# 持久化相关异常
# ===================
class PersistenceError(AppException):
    """持久化错误异常.

    历史记录写入失败（如存储配额不足）时使用，仅记录日志。
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, "PERSISTENCE_ERROR")


# ===================
# 用户输入相关异常
# ===================
class UserInputError(AppException):
    """用户输入错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "USER_INPUT_ERROR")
