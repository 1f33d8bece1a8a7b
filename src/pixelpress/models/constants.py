"""图像处理相关常量定义。

基于 Pillow 动态 MIME 注册表的格式管理，避免硬编码重复。
"""

from typing import Final

from PIL import Image


class ImageFormats:
    """基于 Pillow 的动态图像格式管理"""

    # 浏览器与操作系统常见的非标准 MIME 别名
    MIME_ALIASES: Final[dict[str, str]] = {
        "image/jpg": "image/jpeg",
        "image/pjpeg": "image/jpeg",
        "image/x-png": "image/png",
    }

    # Pillow 注册表里没有或不唯一的 MIME 映射
    SPECIAL_MIME_FORMATS: Final[dict[str, str]] = {
        "image/jpeg": "JPEG",
        "image/png": "PNG",
        "image/webp": "WEBP",
        "image/gif": "GIF",
        "image/bmp": "BMP",
        "image/tiff": "TIFF",
    }

    @classmethod
    def normalize_mime(cls, mime_type: str) -> str:
        """标准化 MIME 类型"""
        mime = mime_type.strip().lower()
        return cls.MIME_ALIASES.get(mime, mime)

    @classmethod
    def get_pillow_format(cls, mime_type: str) -> str | None:
        """根据 MIME 类型查找 Pillow 可写入的格式名，找不到时返回 None"""
        mime = cls.normalize_mime(mime_type)
        # 确保插件已加载，MIME 与写入注册表才完整
        Image.init()

        format_name = cls.SPECIAL_MIME_FORMATS.get(mime)
        if format_name is None:
            for fmt, registered_mime in Image.MIME.items():
                if registered_mime == mime:
                    format_name = fmt
                    break

        if format_name is None:
            return None

        return format_name if format_name in Image.SAVE else None

    @classmethod
    def get_mime_from_format(cls, format_name: str | None) -> str | None:
        """根据 Pillow 格式名获取 MIME 类型"""
        if not format_name:
            return None
        Image.init()
        return Image.MIME.get(format_name.upper())


class QualityDefaults:
    """质量相关默认值"""

    # 设置中的质量取值 (0, 1]
    DEFAULT: Final[float] = 0.8
    MIN_QUALITY: Final[float] = 0.0
    MAX_QUALITY: Final[float] = 1.0

    # Pillow 编码器的质量范围
    PILLOW_MIN: Final[int] = 1
    PILLOW_MAX: Final[int] = 100


class ProcessingDefaults:
    """处理相关默认值"""

    # 源为 PNG、目标为 JPEG 时的铺底颜色
    FILL_COLOR: Final[tuple[int, int, int]] = (255, 255, 255)

    # 未指定命名策略时的后缀
    NAME_SUFFIX: Final[str] = "-min"

    # 上游允许的 MIME 前缀
    IMAGE_MIME_PREFIX: Final[str] = "image/"


def normalize_mime(mime_type: str) -> str:
    """获取标准化的 MIME 类型"""
    return ImageFormats.normalize_mime(mime_type)


def get_pillow_format(mime_type: str) -> str | None:
    """获取 MIME 对应的 Pillow 格式名"""
    return ImageFormats.get_pillow_format(mime_type)


def is_image_mime(mime_type: str | None) -> bool:
    """检查声明的 MIME 类型是否为图片"""
    return bool(mime_type) and mime_type.lower().startswith(
        ProcessingDefaults.IMAGE_MIME_PREFIX
    )
