"""压缩设置模型。

定义一次压缩批次使用的设置快照。
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import QualityDefaults, normalize_mime


class OutputFormat(str, Enum):
    """输出格式枚举，取值即目标 MIME 类型"""

    ORIGINAL = "original"  # 保持原格式
    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"

    @property
    def extension(self) -> str | None:
        """格式对应的文件扩展名，ORIGINAL 返回 None"""
        match self:
            case OutputFormat.JPEG:
                return "jpg"
            case OutputFormat.PNG:
                return "png"
            case OutputFormat.WEBP:
                return "webp"
            case _:
                return None

    @classmethod
    def parse(cls, value: "str | OutputFormat") -> "OutputFormat":
        """从枚举值、枚举名或常见别名解析输出格式"""
        if isinstance(value, OutputFormat):
            return value

        text = value.strip()
        aliases = {"JPG": "JPEG", "ORIGIN": "ORIGINAL"}
        upper = aliases.get(text.upper(), text.upper())
        if upper in cls.__members__:
            return cls[upper]
        return cls(normalize_mime(text))


class CompressionSettings(BaseModel):
    """压缩设置，冻结的值对象

    一次批次开始时捕获一份快照，批次执行中对设置的修改不影响该批次。
    """

    model_config = ConfigDict(frozen=True)

    quality: float = Field(
        QualityDefaults.DEFAULT,
        gt=QualityDefaults.MIN_QUALITY,
        le=QualityDefaults.MAX_QUALITY,
        description="编码质量 (0, 1]，越高越清晰、文件越大",
    )
    output_format: OutputFormat = Field(OutputFormat.ORIGINAL, description="输出格式")
    max_width: int | None = Field(None, gt=0, description="最大宽度（像素）")
    keep_original_name: bool = Field(
        False, description="True 保留原名，False 添加 -min 后缀"
    )

    @field_validator("output_format", mode="before")
    @classmethod
    def parse_output_format(cls, v: object) -> object:
        # 允许使用 "JPEG"、"jpg"、"image/jpeg" 等写法
        if isinstance(v, str):
            return OutputFormat.parse(v)
        return v

    @property
    def pillow_quality(self) -> int:
        """换算为 Pillow 编码器的 1-100 质量值"""
        return to_pillow_quality(self.quality)

    def resolve_mime_type(self, source_mime_type: str) -> str:
        """确定目标 MIME 类型：ORIGINAL 沿用源类型"""
        return resolve_target_mime(source_mime_type, self.output_format)

    def snapshot(self) -> "CompressionSettings":
        """返回批次开始时捕获的设置快照"""
        return self.model_copy()


def to_pillow_quality(quality: float) -> int:
    """把 (0, 1] 的质量换算为 Pillow 的 1-100，超出范围时截断"""
    value = round(quality * QualityDefaults.PILLOW_MAX)
    return max(QualityDefaults.PILLOW_MIN, min(QualityDefaults.PILLOW_MAX, value))


def resolve_target_mime(source_mime_type: str, output_format: OutputFormat) -> str:
    """根据输出格式确定目标 MIME 类型"""
    if output_format == OutputFormat.ORIGINAL:
        return normalize_mime(source_mime_type)
    return output_format.value
