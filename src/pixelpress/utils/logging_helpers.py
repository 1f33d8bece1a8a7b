"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_format: str | None = None) -> None:
    """按应用配置初始化根日志记录器

    Args:
        level: 日志级别名称，如 "INFO"、"DEBUG"
        log_format: 日志格式字符串，None 时使用 logging 默认格式
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    kwargs: dict[str, object] = {"level": numeric_level}
    if log_format:
        kwargs["format"] = log_format
    logging.basicConfig(**kwargs)  # type: ignore[arg-type]
