"""核心模块包。

图片编解码适配和单张图片的状态机。
"""

from .codec import (
    EncodedImage,
    compute_target_size,
    decode_image,
    encode,
    fill_background,
    needs_background_fill,
)
from .state_machine import (
    ELIGIBLE_STATUSES,
    begin_processing,
    can_transition,
    is_eligible,
    mark_completed,
    mark_failed,
)


__all__ = [
    "ELIGIBLE_STATUSES",
    "EncodedImage",
    "begin_processing",
    "can_transition",
    "compute_target_size",
    "decode_image",
    "encode",
    "fill_background",
    "is_eligible",
    "mark_completed",
    "mark_failed",
    "needs_background_fill",
]
