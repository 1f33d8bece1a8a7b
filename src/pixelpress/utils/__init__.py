"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

# 从文件助手模块导入
from .file_helpers import (
    detect_mime_type,
    read_source_files,
    write_export_entries,
)

# 从日志工具模块导入
from .logging_helpers import configure_logging, get_logger

# 从消息格式化模块导入
from .message_formatter import MessageFormatter

# 从命名助手模块导入
from .naming_helpers import (
    FileNamingStrategy,
    PathResolver,
    resolve_name,
    split_file_name,
)


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "configure_logging",
    "detect_mime_type",
    "get_logger",
    "read_source_files",
    "resolve_name",
    "split_file_name",
    "write_export_entries",
]
