"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass

from .models.constants import ProcessingDefaults as CodecDefaults
from .models.settings import CompressionSettings, OutputFormat


@dataclass(frozen=True)
class SessionDefaults:
    """新会话的默认压缩设置"""

    QUALITY: float = 0.8
    OUTPUT_FORMAT: str = OutputFormat.ORIGINAL.value
    MAX_WIDTH: int | None = None
    KEEP_ORIGINAL_NAME: bool = False


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 同时在编码的图片数，None 表示不限制
    MAX_CONCURRENCY: int | None = None

    # 执行器设置
    MAX_WORKERS: int = 4
    EXECUTOR_TYPE: str = "thread"  # thread / process / default

    # PNG 转 JPEG 的铺底颜色
    FILL_COLOR: tuple[int, int, int] = CodecDefaults.FILL_COLOR


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.session = SessionDefaults()
        self.processing = ProcessingDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 会话默认设置
        if quality := os.getenv("PIXELPRESS_QUALITY"):
            object.__setattr__(self.session, "QUALITY", float(quality))

        if output_format := os.getenv("PIXELPRESS_OUTPUT_FORMAT"):
            object.__setattr__(
                self.session, "OUTPUT_FORMAT", OutputFormat.parse(output_format).value
            )

        if max_width := os.getenv("PIXELPRESS_MAX_WIDTH"):
            object.__setattr__(self.session, "MAX_WIDTH", int(max_width))

        if keep_name := os.getenv("PIXELPRESS_KEEP_ORIGINAL_NAME"):
            object.__setattr__(self.session, "KEEP_ORIGINAL_NAME", _env_bool(keep_name))

        # 处理配置
        if max_concurrency := os.getenv("PIXELPRESS_MAX_CONCURRENCY"):
            value = int(max_concurrency)
            object.__setattr__(
                self.processing, "MAX_CONCURRENCY", value if value > 0 else None
            )

        if max_workers := os.getenv("PIXELPRESS_MAX_WORKERS"):
            object.__setattr__(self.processing, "MAX_WORKERS", int(max_workers))

        if executor_type := os.getenv("PIXELPRESS_EXECUTOR_TYPE"):
            object.__setattr__(self.processing, "EXECUTOR_TYPE", executor_type.lower())

        # 日志配置
        if log_level := os.getenv("PIXELPRESS_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

    def default_settings(self) -> CompressionSettings:
        """根据配置构建新会话的初始设置"""
        return CompressionSettings(
            quality=self.session.QUALITY,
            output_format=OutputFormat.parse(self.session.OUTPUT_FORMAT),
            max_width=self.session.MAX_WIDTH,
            keep_original_name=self.session.KEEP_ORIGINAL_NAME,
        )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
