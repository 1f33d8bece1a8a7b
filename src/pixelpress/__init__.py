"""本地批量图片压缩库。

基于 Pillow 的图片压缩会话：逐张解码、缩放、按目标格式和质量重新编码。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "本地批量图片压缩，基于 Pillow 11"

# 核心功能导出
from .core.codec import encode
from .engine.scheduler import BatchScheduler
from .models import (
    CompressionSettings,
    CompressionStatus,
    ExportEntry,
    ImageItem,
    OutputFormat,
    RunSummary,
    SourceFile,
)
from .session import ImageSession
from .utils.naming_helpers import resolve_name


__all__ = [
    "BatchScheduler",
    "CompressionSettings",
    "CompressionStatus",
    "ExportEntry",
    "ImageItem",
    "ImageSession",
    "OutputFormat",
    "RunSummary",
    "SourceFile",
    "encode",
    "get_version",
    "resolve_name",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
