"""批次结果模型。

定义单张图片编码结果和一次批次的统计信息。
"""

from typing import Any, TypedDict

from humanize import naturalsize
from pydantic import BaseModel, Field

from .image_item import CompressionStatus, EncodedBlob


class EncodeOutcome(BaseModel):
    """单张图片的编码结果，按 id 回写到条目状态"""

    item_id: str = Field(description="图片 id")
    status: CompressionStatus = Field(description="COMPLETED 或 ERROR")
    result: EncodedBlob | None = Field(None, description="编码结果")
    error: str | None = Field(None, description="失败原因")

    @property
    def success(self) -> bool:
        return self.status == CompressionStatus.COMPLETED


class RunSummary(BaseModel):
    """一次批次的统计信息，仅用于日志和展示"""

    selected_ids: list[str] = Field(default_factory=list, description="本批次选中的 id")
    outcomes: list[EncodeOutcome] = Field(default_factory=list, description="各图片结果")
    dropped_ids: list[str] = Field(
        default_factory=list, description="回写时已被移除的 id"
    )

    @property
    def is_noop(self) -> bool:
        """没有可处理的图片"""
        return not self.selected_ids

    def get_applied_outcomes(self) -> list[EncodeOutcome]:
        """已回写到集合中的结果，不含回写时被丢弃的"""
        dropped = set(self.dropped_ids)
        return [o for o in self.outcomes if o.item_id not in dropped]

    def get_completed_ids(self) -> list[str]:
        return [o.item_id for o in self.get_applied_outcomes() if o.success]

    def get_failed(self) -> dict[str, str | None]:
        """失败的 id 与原因"""
        return {o.item_id: o.error for o in self.get_applied_outcomes() if not o.success}

    def get_total_compressed_size(self) -> int:
        return sum(
            o.result.size for o in self.get_applied_outcomes() if o.result is not None
        )

    def get_summary(self) -> str:
        """批次摘要"""
        if self.is_noop:
            return "没有需要处理的图片"

        total = len(self.selected_ids)
        completed = len(self.get_completed_ids())
        output_size = naturalsize(self.get_total_compressed_size(), binary=True)
        summary = f"完成 {completed}/{total} 张图片，输出共 {output_size}"
        if self.dropped_ids:
            summary += f"，丢弃 {len(self.dropped_ids)} 张已移除或已变更的图片"
        return summary


class ItemView(TypedDict):
    """图片条目的展示数据"""

    id: str
    name: str
    status: str
    original_size: int
    compressed_size: int
    savings_percent: int
    summary: str
    error: str | None


class SessionStats(TypedDict):
    """会话统计数据"""

    total: int
    by_status: dict[str, int]
    total_original_size: int
    total_compressed_size: int
    is_processing: bool
    all_completed: bool


def item_to_view(item: Any) -> ItemView:
    """把 ImageItem 转换为展示数据"""
    return {
        "id": item.id,
        "name": item.name,
        "status": item.status.value,
        "original_size": item.original_size,
        "compressed_size": item.compressed_size,
        "savings_percent": item.get_savings_percent(),
        "summary": item.get_summary(),
        "error": item.error,
    }
