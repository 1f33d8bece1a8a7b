"""批次调度模块。

选出可处理的图片，一次性标记为 PROCESSING，然后并发地逐张编码，
每张图片的结果按 id 独立回写。单张失败不会影响其他图片。
"""

import asyncio
from collections.abc import Callable, Iterable

from ..core import state_machine
from ..core.codec import EncodedImage, encode
from ..exceptions import ErrorHandler, InvalidTransitionError
from ..models.constants import ProcessingDefaults
from ..models.image_item import CompressionStatus, EncodedBlob, ImageItem
from ..models.run_result import EncodeOutcome, RunSummary
from ..models.settings import CompressionSettings
from ..utils.logging_helpers import get_logger
from .concurrent_executor import ConcurrentExecutor
from .store import ItemStore


logger = get_logger()

Codec = Callable[..., EncodedImage]


class BatchScheduler:
    """批量压缩调度器

    不保留任何条目引用；每次 run_batch 只依赖传入的集合和设置快照。
    调用方需保证同一集合上不会同时进行两次批次。
    """

    def __init__(
        self,
        executor: ConcurrentExecutor | None = None,
        codec: Codec = encode,
        fill_color: tuple[int, int, int] = ProcessingDefaults.FILL_COLOR,
    ):
        """初始化调度器

        Args:
            executor: 并发执行器，默认使用线程池
            codec: 编码函数，签名与 core.codec.encode 一致
            fill_color: PNG 转 JPEG 时的铺底颜色
        """
        self.executor = executor or ConcurrentExecutor()
        self.codec = codec
        self.fill_color = fill_color

    @staticmethod
    def select_eligible(
        items: Iterable[ImageItem], force_ids: Iterable[str] = ()
    ) -> list[ImageItem]:
        """选出本批次要处理的图片

        IDLE 和 ERROR 默认选中；COMPLETED 只在 id 被显式强制时选中；
        PROCESSING 永远跳过。
        """
        forced = set(force_ids)
        return [
            item
            for item in items
            if state_machine.is_eligible(item)
            or (item.id in forced and item.status == CompressionStatus.COMPLETED)
        ]

    async def run_batch(
        self,
        store: ItemStore,
        settings: CompressionSettings,
        force_ids: Iterable[str] = (),
    ) -> RunSummary:
        """执行一次批次

        Args:
            store: 图片集合
            settings: 压缩设置，开始前捕获快照
            force_ids: 需要强制重新压缩的已完成图片 id

        Returns:
            RunSummary: 批次统计，仅供展示
        """
        snapshot = settings.snapshot()
        forced = set(force_ids)
        eligible = self.select_eligible(store.snapshot(), forced)

        if not eligible:
            logger.info("没有需要处理的图片")
            return RunSummary()

        # 所有选中的图片在一次提交中进入 PROCESSING
        store.commit(
            {
                item.id: state_machine.begin_processing(item, force=item.id in forced)
                for item in eligible
            }
        )
        selected_ids = [item.id for item in eligible]
        logger.info(
            f"开始压缩 {len(selected_ids)} 张图片: "
            f"format={snapshot.output_format.value}, quality={snapshot.quality}, "
            f"max_width={snapshot.max_width}"
        )

        limiter = self.executor.create_limiter()
        settled = await asyncio.gather(
            *(
                self._process_and_reconcile(store, item, snapshot, limiter)
                for item in eligible
            )
        )

        summary = RunSummary(
            selected_ids=selected_ids,
            outcomes=[outcome for outcome, _ in settled],
            dropped_ids=[outcome.item_id for outcome, applied in settled if not applied],
        )
        logger.info(summary.get_summary())
        return summary

    async def _process_and_reconcile(
        self,
        store: ItemStore,
        item: ImageItem,
        settings: CompressionSettings,
        limiter: asyncio.Semaphore | None,
    ) -> tuple[EncodeOutcome, bool]:
        """编码完成后立即按 id 回写，返回结果和是否已回写"""
        outcome = await self._process_item(item, settings, limiter)
        try:
            applied = store.reconcile(outcome.item_id, _apply_outcome(outcome))
        except InvalidTransitionError as e:
            # 条目已不在 PROCESSING，结果作废
            logger.warning(e.message)
            applied = False
        return outcome, applied

    async def _process_item(
        self,
        item: ImageItem,
        settings: CompressionSettings,
        limiter: asyncio.Semaphore | None,
    ) -> EncodeOutcome:
        """编码单张图片，所有异常都转换为 ERROR 结果"""
        try:
            encoded = await self.executor.run(
                self.codec,
                item.source.data,
                item.source.mime_type,
                settings.quality,
                settings.output_format,
                settings.max_width,
                self.fill_color,
                limiter=limiter,
            )
            blob = EncodedBlob(
                data=encoded.data,
                mime_type=encoded.mime_type,
                output_format=settings.output_format,
                dimensions=encoded.dimensions,
            )
        except Exception as e:
            message = ErrorHandler.handle_item_error(e, item.id, f"压缩 {item.name}")
            return EncodeOutcome(
                item_id=item.id, status=CompressionStatus.ERROR, error=message
            )

        logger.debug(f"处理成功: {item.name} ({item.original_size} → {blob.size})")
        return EncodeOutcome(
            item_id=item.id, status=CompressionStatus.COMPLETED, result=blob
        )


def _apply_outcome(outcome: EncodeOutcome) -> Callable[[ImageItem], ImageItem]:
    """把编码结果转换为基于当前条目的更新函数"""

    def update(item: ImageItem) -> ImageItem:
        if outcome.result is not None:
            return state_machine.mark_completed(item, outcome.result)
        return state_machine.mark_failed(item, outcome.error or "压缩失败")

    return update
