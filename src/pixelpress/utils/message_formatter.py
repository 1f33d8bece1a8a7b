"""消息格式化工具模块。

提供统一的错误消息、状态消息格式化功能。
"""

from pathlib import Path
from typing import Any


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def item_not_found(item_id: str) -> str:
        """图片条目不存在错误消息"""
        return f"图片不存在: {item_id}"

    @staticmethod
    def not_an_image(name: str, mime_type: str | None) -> str:
        """非图片文件消息"""
        return f"跳过非图片文件: {name} ({mime_type or '未知类型'})"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def invalid_transition(item_id: str, source: str, target: str) -> str:
        """非法状态转换消息"""
        return f"非法状态转换 [{item_id}]: {source} → {target}"

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

