"""图片编解码适配模块。

解码 → 计算目标尺寸 → 绘制到画布 → （PNG 转 JPEG 时）白色铺底 → 按目标格式编码。
纯函数实现，不持有任何条目引用，可以在线程池或进程池中执行。
"""

import math
from io import BytesIO
from typing import NamedTuple

from PIL import Image, ImageOps

from ..exceptions import EncodeError, handle_codec_errors
from ..models.constants import ProcessingDefaults, get_pillow_format, normalize_mime
from ..models.settings import OutputFormat, resolve_target_mime, to_pillow_quality
from ..utils.logging_helpers import get_logger


logger = get_logger()

JPEG_MIME = "image/jpeg"
PNG_MIME = "image/png"


class EncodedImage(NamedTuple):
    """编码输出"""

    data: bytes
    mime_type: str
    dimensions: tuple[int, int]


def compute_target_size(
    width: int, height: int, max_width: int | None = None
) -> tuple[int, int]:
    """计算目标尺寸

    只有源宽度超过 max_width 时才按比例缩小，从不放大。
    高度按同一比例缩放后四舍五入，至少为 1。
    """
    if not max_width or width <= max_width:
        return width, height

    scale = max_width / width
    target_height = max(1, math.floor(height * scale + 0.5))
    return max_width, target_height


def needs_background_fill(source_mime_type: str, target_mime_type: str) -> bool:
    """PNG 转 JPEG 时需要铺底，JPEG 没有透明通道"""
    return (
        normalize_mime(target_mime_type) == JPEG_MIME
        and normalize_mime(source_mime_type) == PNG_MIME
    )


@handle_codec_errors("decode")
def decode_image(data: bytes) -> Image.Image:
    """把字节解码为位图，应用 EXIF 方向，多帧图片取第一帧"""
    with Image.open(BytesIO(data)) as img:
        img.load()
        # exif_transpose 总是返回新对象，关闭源文件后仍然可用
        return ImageOps.exif_transpose(img)


def render_surface(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """把位图绘制到目标尺寸的画布上

    有透明信息时画布为 RGBA，否则为 RGB。
    """
    mode = "RGBA" if img.has_transparency_data else "RGB"
    surface = img.convert(mode)
    if surface.size != size:
        surface = surface.resize(size, Image.Resampling.LANCZOS)
    return surface


def fill_background(
    surface: Image.Image,
    color: tuple[int, int, int] = ProcessingDefaults.FILL_COLOR,
) -> Image.Image:
    """在同尺寸的不透明画布上铺底色，再把原画布合成上去"""
    background = Image.new("RGBA", surface.size, (*color, 255))
    background.alpha_composite(surface.convert("RGBA"))
    return background.convert("RGB")


@handle_codec_errors("encode")
def encode_surface(surface: Image.Image, pillow_format: str, quality: int) -> bytes:
    """把画布编码为目标格式，无损格式自行忽略 quality"""
    if pillow_format == "JPEG" and surface.mode != "RGB":
        # 非 PNG 源的透明区域直接丢弃 alpha
        surface = surface.convert("RGB")

    buffer = BytesIO()
    surface.save(buffer, format=pillow_format, quality=quality)
    data = buffer.getvalue()
    if not data:
        raise EncodeError(f"编码器没有输出数据: {pillow_format}")
    return data


def encode(
    source: bytes,
    source_mime_type: str,
    quality: float,
    output_format: OutputFormat | str,
    max_width: int | None = None,
    fill_color: tuple[int, int, int] = ProcessingDefaults.FILL_COLOR,
) -> EncodedImage:
    """压缩单张图片

    Args:
        source: 原始字节，不会被修改
        source_mime_type: 源声明的 MIME 类型
        quality: 编码质量 (0, 1]
        output_format: 输出格式，ORIGINAL 沿用源 MIME
        max_width: 最大宽度，None 不缩放
        fill_color: PNG 转 JPEG 时的铺底颜色

    Returns:
        EncodedImage: 非空的编码结果

    Raises:
        DecodeError: 输入无法解码
        EncodeError: 目标格式无法写入或编码器没有输出
    """
    output_format = OutputFormat.parse(output_format)

    img = decode_image(source)
    target_size = compute_target_size(img.width, img.height, max_width)

    target_mime = resolve_target_mime(source_mime_type, output_format)
    pillow_format = get_pillow_format(target_mime)
    if pillow_format is None:
        raise EncodeError(f"不支持的输出类型: {target_mime}")

    surface = render_surface(img, target_size)
    if needs_background_fill(source_mime_type, target_mime):
        surface = fill_background(surface, fill_color)

    data = encode_surface(surface, pillow_format, to_pillow_quality(quality))
    logger.debug(
        f"编码完成: {img.size} → {surface.size}, {target_mime}, {len(data)} bytes"
    )
    return EncodedImage(data=data, mime_type=target_mime, dimensions=surface.size)
