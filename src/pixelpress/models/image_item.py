"""图片条目模型。

定义一张图片从加入到压缩完成的数据结构。
"""

import uuid
from enum import Enum
from typing import NamedTuple

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .settings import OutputFormat


class CompressionStatus(str, Enum):
    """图片压缩状态"""

    IDLE = "IDLE"  # 等待压缩
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class SourceFile(NamedTuple):
    """上游提供的原始文件"""

    name: str
    data: bytes
    mime_type: str


class ExportEntry(NamedTuple):
    """交给导出方的数据：文件名和编码字节"""

    item_id: str
    file_name: str
    data: bytes


class SourceBlob(BaseModel):
    """原始输入数据，创建后不可修改"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(description="原始字节")
    mime_type: str = Field(description="声明的 MIME 类型")

    @property
    def size(self) -> int:
        return len(self.data)


class EncodedBlob(BaseModel):
    """编码输出数据"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(min_length=1, description="编码后的字节")
    mime_type: str = Field(description="实际输出的 MIME 类型")
    output_format: OutputFormat = Field(description="编码时使用的输出格式设置")
    dimensions: tuple[int, int] | None = Field(None, description="输出尺寸")

    @property
    def size(self) -> int:
        return len(self.data)


def generate_item_id() -> str:
    """生成不会重复的图片 id"""
    return uuid.uuid4().hex


class ImageItem(BaseModel):
    """单张图片及其压缩状态

    冻结模型，状态变化由 core.state_machine 重新构造并校验新对象。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_item_id, description="唯一标识")
    name: str = Field(description="原始文件名")
    source: SourceBlob = Field(description="原始数据")
    original_size: int = Field(ge=0, description="原始大小（字节）")
    status: CompressionStatus = Field(CompressionStatus.IDLE, description="压缩状态")
    result: EncodedBlob | None = Field(None, description="压缩结果")
    error: str | None = Field(None, description="失败原因")

    @model_validator(mode="after")
    def validate_state_fields(self) -> "ImageItem":
        if self.original_size != self.source.size:
            raise ValueError("original_size 必须等于原始数据长度")

        match self.status:
            case CompressionStatus.IDLE | CompressionStatus.PROCESSING:
                if self.result is not None or self.error is not None:
                    raise ValueError(f"{self.status.value} 状态不能携带结果或错误")
            case CompressionStatus.COMPLETED:
                if self.result is None or self.error is not None:
                    raise ValueError("COMPLETED 状态必须有结果且没有错误")
            case CompressionStatus.ERROR:
                if self.error is None or self.result is not None:
                    raise ValueError("ERROR 状态必须有错误且没有结果")
        return self

    @classmethod
    def from_source(cls, source_file: SourceFile) -> "ImageItem":
        """由上游文件创建 IDLE 状态的条目"""
        blob = SourceBlob(data=source_file.data, mime_type=source_file.mime_type)
        return cls(name=source_file.name, source=blob, original_size=blob.size)

    @property
    def compressed_size(self) -> int:
        """压缩后大小，未完成时为 0"""
        return self.result.size if self.result is not None else 0

    def get_size_saved(self) -> int:
        """节省的字节数，文件变大时为负数"""
        if self.result is None:
            return 0
        return self.original_size - self.compressed_size

    def get_savings_percent(self) -> int:
        """节省百分比（四舍五入）"""
        if self.result is None or self.original_size == 0:
            return 0
        return round(self.get_size_saved() / self.original_size * 100)

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)

    def get_original_size_human(self) -> str:
        return self.format_size(self.original_size)

    def get_compressed_size_human(self) -> str:
        return self.format_size(self.compressed_size)

    def get_summary(self) -> str:
        """压缩结果摘要"""
        match self.status:
            case CompressionStatus.COMPLETED:
                return (
                    f"{self.get_original_size_human()} → "
                    f"{self.get_compressed_size_human()} "
                    f"({-self.get_savings_percent():+d}%)"
                )
            case CompressionStatus.ERROR:
                return f"失败: {self.error}"
            case CompressionStatus.PROCESSING:
                return "正在处理..."
            case _:
                return f"{self.get_original_size_human()} 等待压缩"
