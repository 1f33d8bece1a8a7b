"""文件工具模块。

读取本地图片作为上游输入，把导出数据写入目录。
"""

import mimetypes
from collections.abc import Iterable, Iterator
from io import BytesIO
from pathlib import Path

from PIL import Image

from ..models.constants import ImageFormats, is_image_mime
from ..models.image_item import ExportEntry, SourceFile
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter
from .naming_helpers import PathResolver


logger = get_logger()


def detect_mime_type(file_name: str, data: bytes | None = None) -> str | None:
    """获取图片的 MIME 类型

    先按扩展名判断，判断不出图片类型时再让 Pillow 识别文件头。

    Args:
        file_name: 文件名
        data: 文件内容（可选）

    Returns:
        str | None: MIME 类型，如 'image/jpeg'，失败时返回 None
    """
    guessed, _ = mimetypes.guess_type(file_name)
    if is_image_mime(guessed):
        return guessed

    if data is None:
        return guessed

    try:
        with Image.open(BytesIO(data)) as img:
            return ImageFormats.get_mime_from_format(img.format) or guessed
    except Exception as e:
        logger.debug(MessageFormatter.operation_failed("获取 MIME 类型", file_name, e))
        return guessed


def read_source_files(paths: Iterable[str | Path]) -> Iterator[SourceFile]:
    """读取本地文件作为上游输入

    不存在或无法读取的文件记录警告后跳过。

    Yields:
        SourceFile: 文件名、字节和 MIME 类型
    """
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            logger.warning(MessageFormatter.file_not_found(path))
            continue

        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(MessageFormatter.operation_failed("读取文件", path, e))
            continue

        mime_type = detect_mime_type(path.name, data) or "application/octet-stream"
        yield SourceFile(name=path.name, data=data, mime_type=mime_type)


def write_export_entries(
    entries: Iterable[ExportEntry], output_dir: str | Path
) -> list[Path]:
    """把导出数据写入目录，已存在的文件不会被覆盖

    Args:
        entries: 导出数据
        output_dir: 输出目录，不存在时自动创建

    Returns:
        list[Path]: 实际写入的文件路径
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    reserved: set[Path] = set()
    for entry in entries:
        # 只取文件名部分，避免写出输出目录
        file_name = Path(entry.file_name).name or entry.item_id
        target = PathResolver.ensure_unique_path(output_dir / file_name, reserved)
        reserved.add(target)
        target.write_bytes(entry.data)
        written.append(target)
        logger.debug(f"已导出: {entry.item_id} → {target}")

    return written
