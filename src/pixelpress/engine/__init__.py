"""图片压缩处理引擎模块。

包含图片集合存储、并发执行和批次调度等核心处理逻辑。
"""

from .concurrent_executor import ConcurrentExecutor
from .scheduler import BatchScheduler
from .store import ItemStore


__all__ = [
    "BatchScheduler",
    "ConcurrentExecutor",
    "ItemStore",
]
