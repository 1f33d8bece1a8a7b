"""本地图片压缩 MCP 服务器。

通过 stdio 暴露一个压缩会话：添加图片、修改设置、批量压缩、导出结果。
图片数据始终留在本机进程内。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .exceptions import PixelPressError, SessionBusyError, ValidationError
from .models import item_to_view
from .session import ImageSession
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> dict[str, Any]:
        """构建验证错误结果。"""
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def busy_error(message: str) -> dict[str, Any]:
        """构建会话忙错误结果。"""
        return MCPResponseBuilder.error(message=message, error_type="busy")

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> dict[str, Any]:
        """构建处理错误结果。"""
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="processing",
            details=details,
        )


# 配置日志
app_config = get_config()
configure_logging(app_config.logging.LOG_LEVEL, app_config.logging.LOG_FORMAT)
logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("本地图片压缩服务")

# 全局会话实例
session = ImageSession()


def _session_state() -> dict[str, Any]:
    """当前会话的图片列表和统计"""
    return {
        "items": [item_to_view(item) for item in session.items],
        "stats": session.get_stats(),
        "settings": session.settings.model_dump(mode="json"),
    }


@mcp.tool()
def add_images(paths: list[str]) -> MCPResponse:
    """添加本地图片到压缩列表，非图片文件会被跳过

    Args:
        paths: 图片文件路径列表
    """
    try:
        added = session.add_paths(paths)
        return {
            "success": True,
            "added": [item_to_view(item) for item in added],
            **_session_state(),
        }
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("添加图片", ", ".join(paths), e))
        return MCPResponseBuilder.processing_error(str(e), "添加图片")


@mcp.tool()
def list_images() -> MCPResponse:
    """列出所有图片及其压缩状态"""
    return {"success": True, **_session_state()}


@mcp.tool()
def update_settings(
    quality: float | None = None,
    output_format: str | None = None,
    max_width: int | None = None,
    clear_max_width: bool = False,
    keep_original_name: bool | None = None,
) -> MCPResponse:
    """修改压缩设置，只影响之后发起的批次

    Args:
        quality: 压缩质量，取值 (0, 1]
        output_format: original / jpeg / png / webp
        max_width: 最大宽度（像素）
        clear_max_width: 为 True 时取消宽度限制
        keep_original_name: True 保留原名，False 添加 -min 后缀
    """
    changes: dict[str, Any] = {}
    if quality is not None:
        changes["quality"] = quality
    if output_format is not None:
        changes["output_format"] = output_format
    if clear_max_width:
        changes["max_width"] = None
    elif max_width is not None:
        changes["max_width"] = max_width
    if keep_original_name is not None:
        changes["keep_original_name"] = keep_original_name

    try:
        settings = session.update_settings(**changes)
    except ValidationError as e:
        return MCPResponseBuilder.validation_error(e.message)

    return {"success": True, "settings": settings.model_dump(mode="json")}


@mcp.tool()
async def compress_images(force_ids: list[str] | None = None) -> MCPResponse:
    """压缩所有等待中和失败的图片

    Args:
        force_ids: 需要用当前设置重新压缩的已完成图片 id
    """
    try:
        summary = await session.compress_all(force_ids or ())
    except SessionBusyError as e:
        return MCPResponseBuilder.busy_error(e.message)
    except PixelPressError as e:
        logger.error(MessageFormatter.operation_failed("批量压缩", "session", e))
        return MCPResponseBuilder.processing_error(e.message, "批量压缩")

    return {
        "success": True,
        "summary": summary.get_summary(),
        "completed": summary.get_completed_ids(),
        "failed": summary.get_failed(),
        **_session_state(),
    }


@mcp.tool()
def remove_image(item_id: str) -> MCPResponse:
    """从列表中移除一张图片"""
    if not session.remove(item_id):
        return MCPResponseBuilder.error(MessageFormatter.item_not_found(item_id))
    return {"success": True, **_session_state()}


@mcp.tool()
def clear_images() -> MCPResponse:
    """清空图片列表"""
    removed = session.clear()
    return {"success": True, "removed": removed}


@mcp.tool()
def export_images(
    output_dir: str,
    keep_original_name: bool | None = None,
    item_ids: list[str] | None = None,
) -> MCPResponse:
    """把已完成的图片写入目录，不会覆盖已有文件

    Args:
        output_dir: 输出目录
        keep_original_name: 命名策略，默认使用当前设置
        item_ids: 只导出这些图片，默认导出全部已完成的图片
    """
    if item_ids:
        skipped = [i for i in item_ids if session.export_entry(i) is None]
        if skipped:
            return MCPResponseBuilder.error(
                f"图片不存在或尚未完成压缩: {', '.join(skipped)}",
                details={"item_ids": skipped},
            )

    try:
        written = session.export_to_directory(
            Path(output_dir), keep_original_name, item_ids
        )
    except OSError as e:
        logger.error(MessageFormatter.operation_failed("导出图片", output_dir, e))
        return MCPResponseBuilder.processing_error(str(e), "导出图片")

    return {"success": True, "files": [str(path) for path in written]}


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动图片压缩 MCP 服务器")
    try:
        mcp.run()
    finally:
        session.close()


if __name__ == "__main__":
    main()
