"""文件命名工具模块。

提供导出文件名的生成规则和路径去重功能。
"""

import itertools
from pathlib import Path

from ..models.constants import ProcessingDefaults
from ..models.settings import OutputFormat


def split_file_name(file_name: str) -> tuple[str, str]:
    """在最后一个 "." 处拆分文件名

    没有 "." 时扩展名为空，整个字符串作为基础名。

    Examples:
        >>> split_file_name("a.b.c")
        ('a.b', 'c')
        >>> split_file_name("noext")
        ('noext', '')
    """
    base, dot, ext = file_name.rpartition(".")
    if not dot:
        return file_name, ""
    return base, ext


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def get_target_extension(source_extension: str, output_format: OutputFormat) -> str:
        """确定目标扩展名，ORIGINAL 沿用源扩展名"""
        return output_format.extension or source_extension

    @staticmethod
    def generate_output_name(
        original_file_name: str,
        output_format: OutputFormat | str,
        keep_original_name: bool,
    ) -> str:
        """生成导出文件名

        Args:
            original_file_name: 原始文件名
            output_format: 输出格式
            keep_original_name: True 为 base.ext，False 为 base-min.ext

        Returns:
            str: 生成的文件名（不含路径）
        """
        output_format = OutputFormat.parse(output_format)
        base, source_ext = split_file_name(original_file_name)
        ext = FileNamingStrategy.get_target_extension(source_ext, output_format)

        if not keep_original_name:
            base += ProcessingDefaults.NAME_SUFFIX

        # 扩展名为空时不保留末尾的点
        return f"{base}.{ext}" if ext else base


def resolve_name(
    original_file_name: str,
    output_format: OutputFormat | str,
    keep_original_name: bool,
) -> str:
    """便捷的文件名解析函数

    Examples:
        >>> resolve_name("photo.png", OutputFormat.JPEG, False)
        'photo-min.jpg'
    """
    return FileNamingStrategy.generate_output_name(
        original_file_name, output_format, keep_original_name
    )


class PathResolver:
    """路径解析器"""

    @staticmethod
    def ensure_unique_path(path: Path, reserved: set[Path] | None = None) -> Path:
        """确保路径唯一，如果文件已存在则添加数字后缀

        Args:
            path: 原始路径
            reserved: 本次导出已占用但尚未写入的路径

        Returns:
            Path: 唯一的路径
        """
        reserved = reserved or set()
        if not path.exists() and path not in reserved:
            return path

        base = path.stem
        suffix = path.suffix
        parent = path.parent

        for counter in itertools.count(1):
            new_path = parent / f"{base}_{counter}{suffix}"
            if not new_path.exists() and new_path not in reserved:
                return new_path

        # 理论上永远不会到达这里，但为了类型检查器
        return path  # pragma: no cover
