"""图片压缩会话。

会话是图片集合和当前设置的唯一持有者：添加、移除、清空图片，
修改设置，发起批次压缩，以及为导出方生成文件名和数据。
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .config import get_config
from .engine.concurrent_executor import ConcurrentExecutor
from .engine.scheduler import BatchScheduler
from .engine.store import ItemStore
from .exceptions import SessionBusyError, ValidationError
from .models import (
    CompressionSettings,
    CompressionStatus,
    ExportEntry,
    ImageItem,
    RunSummary,
    SessionStats,
    SourceFile,
    is_image_mime,
)
from .utils.file_helpers import read_source_files, write_export_entries
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import resolve_name


logger = get_logger()


class ImageSession:
    """图片压缩会话。

    同一时间只允许一个批次，is_processing 为 True 时再次调用
    compress_all 会抛出 SessionBusyError。
    """

    def __init__(
        self,
        settings: CompressionSettings | None = None,
        scheduler: BatchScheduler | None = None,
    ):
        """初始化会话。

        Args:
            settings: 初始设置，默认从应用配置读取
            scheduler: 批次调度器，默认按应用配置创建
        """
        app_config = get_config()
        self._settings = settings or app_config.default_settings()
        self.scheduler = scheduler or BatchScheduler(
            executor=ConcurrentExecutor(
                max_workers=app_config.processing.MAX_WORKERS,
                executor_type=app_config.processing.EXECUTOR_TYPE,
                max_concurrency=app_config.processing.MAX_CONCURRENCY,
            ),
            fill_color=app_config.processing.FILL_COLOR,
        )
        self.store = ItemStore()
        self._is_processing = False

        logger.debug("初始化压缩会话")

    # ------------------------------------------------------------------
    # 图片集合
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[ImageItem, ...]:
        return self.store.snapshot()

    def get(self, item_id: str) -> ImageItem | None:
        return self.store.get(item_id)

    def add_files(self, files: Iterable[SourceFile]) -> list[ImageItem]:
        """添加上游文件，非图片类型的文件被跳过

        Returns:
            list[ImageItem]: 新建的 IDLE 条目
        """
        new_items = []
        for source_file in files:
            if not is_image_mime(source_file.mime_type):
                logger.info(
                    MessageFormatter.not_an_image(
                        source_file.name, source_file.mime_type
                    )
                )
                continue
            new_items.append(ImageItem.from_source(source_file))

        return self.store.add(new_items)

    def add_paths(self, paths: Iterable[str | Path]) -> list[ImageItem]:
        """从本地路径读取并添加图片"""
        return self.add_files(read_source_files(paths))

    def remove(self, item_id: str) -> bool:
        """移除图片，处理中的图片结果会在回写时被丢弃"""
        removed = self.store.remove(item_id)
        if not removed:
            logger.debug(MessageFormatter.item_not_found(item_id))
        return removed

    def clear(self) -> int:
        """清空全部图片"""
        return self.store.clear()

    # ------------------------------------------------------------------
    # 设置
    # ------------------------------------------------------------------

    @property
    def settings(self) -> CompressionSettings:
        return self._settings

    def update_settings(self, **changes: Any) -> CompressionSettings:
        """修改设置，生成新的设置对象，不影响正在进行的批次

        Raises:
            ValidationError: 设置值不合法
        """
        try:
            self._settings = CompressionSettings.model_validate(
                {**self._settings.model_dump(), **changes}
            )
        except PydanticValidationError as e:
            raise ValidationError(_format_validation_error(e)) from e
        return self._settings

    # ------------------------------------------------------------------
    # 压缩
    # ------------------------------------------------------------------

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def all_completed(self) -> bool:
        items = self.items
        return bool(items) and all(
            item.status == CompressionStatus.COMPLETED for item in items
        )

    @property
    def has_completed(self) -> bool:
        return any(item.status == CompressionStatus.COMPLETED for item in self.items)

    async def compress_all(self, force_ids: Iterable[str] = ()) -> RunSummary:
        """压缩所有 IDLE 和 ERROR 状态的图片

        Args:
            force_ids: 需要用当前设置重新压缩的已完成图片 id

        Raises:
            SessionBusyError: 上一批次尚未结束
        """
        if self._is_processing:
            raise SessionBusyError("上一批压缩尚未完成")

        self._is_processing = True
        try:
            return await self.scheduler.run_batch(self.store, self._settings, force_ids)
        finally:
            self._is_processing = False

    # ------------------------------------------------------------------
    # 导出
    # ------------------------------------------------------------------

    def export_entries(self, keep_original_name: bool | None = None) -> list[ExportEntry]:
        """生成所有已完成图片的导出数据

        文件名按图片实际编码时的输出格式生成。

        Args:
            keep_original_name: 命名策略，None 时使用当前设置
        """
        return [
            self._to_export_entry(item, keep_original_name)
            for item in self.items
            if item.status == CompressionStatus.COMPLETED and item.result is not None
        ]

    def export_entry(
        self, item_id: str, keep_original_name: bool | None = None
    ) -> ExportEntry | None:
        """生成单张图片的导出数据，图片不存在或未完成时返回 None"""
        item = self.store.get(item_id)
        if item is None or item.status != CompressionStatus.COMPLETED:
            return None
        return self._to_export_entry(item, keep_original_name)

    def _to_export_entry(
        self, item: ImageItem, keep_original_name: bool | None
    ) -> ExportEntry:
        if keep_original_name is None:
            keep_original_name = self._settings.keep_original_name
        return ExportEntry(
            item_id=item.id,
            file_name=resolve_name(
                item.name, item.result.output_format, keep_original_name
            ),
            data=item.result.data,
        )

    def export_to_directory(
        self,
        output_dir: str | Path,
        keep_original_name: bool | None = None,
        item_ids: Iterable[str] | None = None,
    ) -> list[Path]:
        """把已完成的图片写入目录

        Args:
            output_dir: 输出目录
            keep_original_name: 命名策略，None 时使用当前设置
            item_ids: 只导出这些图片，None 时导出全部已完成的图片
        """
        if item_ids is None:
            entries = self.export_entries(keep_original_name)
        else:
            entries = [
                entry
                for item_id in item_ids
                if (entry := self.export_entry(item_id, keep_original_name))
                is not None
            ]
        return write_export_entries(entries, output_dir)

    def get_stats(self) -> SessionStats:
        """会话统计"""
        items = self.items
        by_status = {status.value: 0 for status in CompressionStatus}
        for item in items:
            by_status[item.status.value] += 1

        return {
            "total": len(items),
            "by_status": by_status,
            "total_original_size": sum(item.original_size for item in items),
            "total_compressed_size": sum(item.compressed_size for item in items),
            "is_processing": self._is_processing,
            "all_completed": self.all_completed,
        }

    def close(self) -> None:
        """关闭调度器使用的执行器"""
        self.scheduler.executor.shutdown()
        logger.debug("压缩会话已关闭")


def _format_validation_error(error: PydanticValidationError) -> str:
    """格式化验证错误"""
    messages = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "settings"
        messages.append(
            MessageFormatter.validation_error(field, err.get("input"), err["msg"])
        )
    return "; ".join(messages)
