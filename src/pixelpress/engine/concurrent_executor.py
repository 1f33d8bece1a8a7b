"""并发执行器模块。

把阻塞的编解码调用交给线程池或进程池，事件循环只在提交与等待处挂起。
"""

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, TypeVar

from ..exceptions import ValidationError


logger = logging.getLogger(__name__)
T = TypeVar("T")

EXECUTOR_TYPES = frozenset({"thread", "process", "default"})


class ConcurrentExecutor:
    """异步并发执行器

    每次 run 提交一个任务；可选的信号量限制同时执行的任务数。
    """

    def __init__(
        self,
        max_workers: int = 4,
        executor_type: str = "thread",
        max_concurrency: int | None = None,
    ):
        """初始化并发执行器

        Args:
            max_workers: 线程池或进程池的最大工作数
            executor_type: 'thread'/'process'/'default'（使用事件循环默认执行器）
            max_concurrency: 同时执行的任务上限，None 为不限制
        """
        if max_workers <= 0:
            raise ValidationError("max_workers 必须大于 0")
        if executor_type not in EXECUTOR_TYPES:
            raise ValidationError(
                f"executor_type 必须是 {', '.join(sorted(EXECUTOR_TYPES))} 之一"
            )
        if max_concurrency is not None and max_concurrency <= 0:
            raise ValidationError("max_concurrency 必须大于 0 或为 None")

        self.max_workers = max_workers
        self.executor_type = executor_type
        self.max_concurrency = max_concurrency
        self._executor: Executor | None = None

    def _get_executor(self) -> Executor | None:
        """延迟创建执行器，'default' 返回 None 交给事件循环"""
        if self._executor is None and self.executor_type != "default":
            executor_class = (
                ProcessPoolExecutor
                if self.executor_type == "process"
                else ThreadPoolExecutor
            )
            logger.debug(
                f"使用{executor_class.__name__}: max_workers={self.max_workers}"
            )
            self._executor = executor_class(max_workers=self.max_workers)
        return self._executor

    def create_limiter(self) -> asyncio.Semaphore | None:
        """为一次批次创建并发限制，信号量必须在运行中的事件循环里创建"""
        if self.max_concurrency is None:
            return None
        return asyncio.Semaphore(self.max_concurrency)

    async def run(
        self,
        func: Callable[..., T],
        *args: Any,
        limiter: asyncio.Semaphore | None = None,
    ) -> T:
        """在执行器中运行阻塞函数并等待结果"""
        loop = asyncio.get_running_loop()
        if limiter is None:
            return await loop.run_in_executor(self._get_executor(), func, *args)
        async with limiter:
            return await loop.run_in_executor(self._get_executor(), func, *args)

    def shutdown(self) -> None:
        """关闭执行器"""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
