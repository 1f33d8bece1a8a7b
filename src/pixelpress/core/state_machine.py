"""图片状态机模块。

定义单张图片的状态生命周期和合法转换。

    IDLE ──▶ PROCESSING ──▶ COMPLETED
               ▲    │
    ERROR ─────┘    └─────▶ ERROR

COMPLETED → PROCESSING 只有调用方显式强制时才允许。
"""

from typing import Any

from ..exceptions import InvalidTransitionError
from ..models.image_item import CompressionStatus, EncodedBlob, ImageItem
from ..utils.message_formatter import MessageFormatter


# 默认允许的转换
TRANSITIONS: dict[CompressionStatus, frozenset[CompressionStatus]] = {
    CompressionStatus.IDLE: frozenset({CompressionStatus.PROCESSING}),
    CompressionStatus.ERROR: frozenset({CompressionStatus.PROCESSING}),
    CompressionStatus.PROCESSING: frozenset(
        {CompressionStatus.COMPLETED, CompressionStatus.ERROR}
    ),
    CompressionStatus.COMPLETED: frozenset(),
}

# 仅在强制重跑时额外允许的转换
FORCED_TRANSITIONS: dict[CompressionStatus, frozenset[CompressionStatus]] = {
    CompressionStatus.COMPLETED: frozenset({CompressionStatus.PROCESSING}),
}

# 批次默认选中的状态
ELIGIBLE_STATUSES: frozenset[CompressionStatus] = frozenset(
    {CompressionStatus.IDLE, CompressionStatus.ERROR}
)


def can_transition(
    source: CompressionStatus, target: CompressionStatus, force: bool = False
) -> bool:
    """检查状态转换是否合法"""
    if target in TRANSITIONS.get(source, frozenset()):
        return True
    return force and target in FORCED_TRANSITIONS.get(source, frozenset())


def is_eligible(item: ImageItem) -> bool:
    """图片是否会被下一批次默认选中"""
    return item.status in ELIGIBLE_STATUSES


def _evolve(item: ImageItem, **changes: Any) -> ImageItem:
    """生成新的条目并重新校验状态字段"""
    return ImageItem(**{**dict(item), **changes})


def _transition(
    item: ImageItem, target: CompressionStatus, force: bool = False, **changes: Any
) -> ImageItem:
    if not can_transition(item.status, target, force):
        raise InvalidTransitionError(
            MessageFormatter.invalid_transition(
                item.id, item.status.value, target.value
            ),
            item.id,
        )
    return _evolve(item, status=target, **changes)


def begin_processing(item: ImageItem, force: bool = False) -> ImageItem:
    """进入 PROCESSING，清除上一次的结果和错误"""
    return _transition(
        item, CompressionStatus.PROCESSING, force=force, result=None, error=None
    )


def mark_completed(item: ImageItem, encoded: EncodedBlob) -> ImageItem:
    """PROCESSING → COMPLETED，附加编码结果"""
    return _transition(item, CompressionStatus.COMPLETED, result=encoded, error=None)


def mark_failed(item: ImageItem, message: str) -> ImageItem:
    """PROCESSING → ERROR，附加错误并丢弃已有结果"""
    return _transition(item, CompressionStatus.ERROR, result=None, error=message)
