"""图像压缩异常处理模块。

定义统一的异常类和错误处理机制，包含编解码异常转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class PixelPressError(Exception):
    """PixelPress 错误基类"""

    def __init__(self, message: str, item_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.item_id = item_id


class ValidationError(PixelPressError):
    """参数验证错误 - 统一的验证错误类型"""

    pass


class CodecError(PixelPressError):
    """编解码错误基类，解码和编码失败的统称"""

    pass


class DecodeError(CodecError):
    """输入字节无法解析为图片（损坏或不支持的格式）"""

    pass


class EncodeError(CodecError):
    """编码器未能为目标类型和质量产出数据"""

    pass


class InvalidTransitionError(PixelPressError):
    """图片状态机不允许的状态转换"""

    pass


class SessionBusyError(PixelPressError):
    """上一批压缩尚未结束时再次发起压缩"""

    pass


def handle_codec_errors(stage: str = "decode"):
    """统一的编解码异常处理装饰器

    把 Pillow 和系统异常转换为 DecodeError / EncodeError，
    已经是 CodecError 的异常原样抛出。

    Args:
        stage: "decode" 或 "encode"，决定转换后的异常类型
    """
    error_class: type[CodecError] = DecodeError if stage == "decode" else EncodeError
    operation_name = "图片解码" if stage == "decode" else "图片编码"

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except CodecError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_class(f"无法识别的图片格式: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise error_class(f"图片尺寸过大，可能存在安全风险: {e}") from e
            except (OSError, SyntaxError) as e:
                logger.debug(f"{operation_name} - 数据错误: {e}")
                raise error_class(f"{operation_name}失败: {e}") from e
            except (ValueError, TypeError, KeyError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise error_class(f"{operation_name}参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误描述和日志记录功能。
    """

    @staticmethod
    def _log_error(
        operation: str, target: str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图像压缩"、"文件读取"等）
            target: 相关图片 id 或文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, target, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def describe(error: BaseException) -> str:
        """把异常转换为面向用户的失败原因"""
        match error:
            case DecodeError() as de:
                return f"解码失败: {de.message}"
            case EncodeError() as ee:
                return f"编码失败: {ee.message}"
            case PixelPressError() as pe:
                return pe.message
            case _:
                return f"压缩失败: {error}"

    @staticmethod
    def handle_item_error(
        error: BaseException, item_id: str, operation: str = "图像压缩"
    ) -> str:
        """记录单张图片的失败并返回错误描述

        编解码错误属于预期内的失败，按 warning 记录；其他异常按 error 记录。
        """
        level = "warning" if isinstance(error, CodecError) else "error"
        if isinstance(error, Exception):
            ErrorHandler._log_error(operation, item_id, error, level)
        return ErrorHandler.describe(error)
