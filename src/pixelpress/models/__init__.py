"""数据模型包。

定义图片条目、压缩设置和批次结果的数据结构。
"""

from .constants import (
    ImageFormats,
    ProcessingDefaults,
    QualityDefaults,
    get_pillow_format,
    is_image_mime,
    normalize_mime,
)
from .image_item import (
    CompressionStatus,
    EncodedBlob,
    ExportEntry,
    ImageItem,
    SourceBlob,
    SourceFile,
)
from .run_result import (
    EncodeOutcome,
    ItemView,
    RunSummary,
    SessionStats,
    item_to_view,
)
from .settings import (
    CompressionSettings,
    OutputFormat,
    resolve_target_mime,
    to_pillow_quality,
)


__all__ = [
    # 核心模型
    "CompressionSettings",
    "CompressionStatus",
    "EncodeOutcome",
    "EncodedBlob",
    "ExportEntry",
    "ImageItem",
    "ItemView",
    "OutputFormat",
    "RunSummary",
    "SessionStats",
    "SourceBlob",
    "SourceFile",
    # 常量和工具
    "ImageFormats",
    "ProcessingDefaults",
    "QualityDefaults",
    "get_pillow_format",
    "is_image_mime",
    "item_to_view",
    "normalize_mime",
    "resolve_target_mime",
    "to_pillow_quality",
]
