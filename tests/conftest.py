"""测试配置文件。

提供测试所需的fixtures和配置。
"""

import io
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from pixelpress.config import reset_config
from pixelpress.core.codec import EncodedImage
from pixelpress.models import CompressionSettings, ImageItem, SourceFile


ImageFactory = Callable[..., bytes]


def _encode(img: Image.Image, format_name: str, **params) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=format_name, **params)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """每个测试使用干净的全局配置"""
    for name in (
        "PIXELPRESS_QUALITY",
        "PIXELPRESS_OUTPUT_FORMAT",
        "PIXELPRESS_MAX_WIDTH",
        "PIXELPRESS_KEEP_ORIGINAL_NAME",
        "PIXELPRESS_MAX_CONCURRENCY",
        "PIXELPRESS_MAX_WORKERS",
        "PIXELPRESS_EXECUTOR_TYPE",
        "PIXELPRESS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def make_image() -> ImageFactory:
    """生成测试图片字节的工厂

    用法: make_image("PNG", (200, 100), mode="RGB", color="red")
    """

    def factory(
        format_name: str = "PNG",
        size: tuple[int, int] = (120, 80),
        mode: str = "RGB",
        color: object = "red",
    ) -> bytes:
        img = Image.new(mode, size, color=color)
        draw = ImageDraw.Draw(img)
        width, height = size
        for i in range(8):
            x, y = (i * 13) % width, (i * 7) % height
            fill = (i * 30 % 256, i * 50 % 256, i * 70 % 256)
            if mode == "RGBA":
                fill = (*fill, 255)
            elif mode == "L":
                fill = fill[0]
            draw.rectangle([x, y, x + width // 8, y + height // 8], fill=fill)
        return _encode(img, format_name)

    return factory


@pytest.fixture
def transparent_png() -> bytes:
    """左半部分完全透明、右半部分不透明蓝色的 PNG"""
    img = Image.new("RGBA", (100, 60), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([50, 0, 99, 59], fill=(0, 0, 255, 255))
    return _encode(img, "PNG")


@pytest.fixture
def noisy_jpeg() -> bytes:
    """细节丰富的 JPEG，用于比较不同质量的输出大小"""
    img = Image.effect_noise((256, 256), 64).convert("RGB")
    return _encode(img, "JPEG", quality=95)


@pytest.fixture
def make_item(make_image) -> Callable[..., ImageItem]:
    """生成 IDLE 状态的图片条目"""

    def factory(
        name: str = "photo.png",
        data: bytes | None = None,
        mime_type: str = "image/png",
    ) -> ImageItem:
        payload = data if data is not None else make_image("PNG")
        return ImageItem.from_source(SourceFile(name, payload, mime_type))

    return factory


@pytest.fixture
def settings() -> CompressionSettings:
    return CompressionSettings()


def fake_encode(
    source: bytes,
    source_mime_type: str,
    quality: float,
    output_format,
    max_width=None,
    fill_color=(255, 255, 255),
) -> EncodedImage:
    """确定性的假编码函数：内容为 "BAD" 时失败，否则返回前缀 + 原始字节"""
    if source == b"BAD":
        from pixelpress.exceptions import DecodeError

        raise DecodeError("模拟解码失败")
    return EncodedImage(data=b"enc:" + source, mime_type="image/png", dimensions=(1, 1))


@pytest.fixture
def fake_codec() -> Callable[..., EncodedImage]:
    return fake_encode
