"""图片集合存储模块。

以 id 为键保存全部图片条目。每次修改都基于旧集合生成新集合后整体替换，
并发的回写之间不会互相覆盖字段。
"""

from collections.abc import Callable, Iterable

from ..models.image_item import ImageItem
from ..utils.logging_helpers import get_logger


logger = get_logger()

Snapshot = tuple[ImageItem, ...]
Listener = Callable[[Snapshot], None]


class ItemStore:
    """按 id 索引、保持插入顺序的图片集合"""

    def __init__(self, items: Iterable[ImageItem] = ()):
        self._items: dict[str, ImageItem] = {item.id: item for item in items}
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> ImageItem | None:
        return self._items.get(item_id)

    def ids(self) -> list[str]:
        return list(self._items)

    def snapshot(self) -> Snapshot:
        """当前集合的只读快照"""
        return tuple(self._items.values())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """订阅每次提交后的快照，返回取消订阅函数"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add(self, items: Iterable[ImageItem]) -> list[ImageItem]:
        """追加新条目，id 已存在的条目被忽略"""
        new_items = [item for item in items if item.id not in self._items]
        if new_items:
            self._replace({**self._items, **{item.id: item for item in new_items}})
        return new_items

    def remove(self, item_id: str) -> bool:
        """移除条目，不存在时返回 False"""
        if item_id not in self._items:
            return False
        self._replace({k: v for k, v in self._items.items() if k != item_id})
        return True

    def clear(self) -> int:
        """清空集合，返回移除的数量"""
        count = len(self._items)
        if count:
            self._replace({})
        return count

    def commit(self, updates: dict[str, ImageItem]) -> list[str]:
        """一次性提交多个条目的新状态

        已被移除的 id 直接丢弃，不视为错误。

        Returns:
            list[str]: 实际更新的 id
        """
        applied = {k: v for k, v in updates.items() if k in self._items}
        dropped = set(updates) - set(applied)
        if dropped:
            logger.debug(f"丢弃已移除条目的更新: {sorted(dropped)}")
        if applied:
            self._replace(
                {k: applied.get(k, v) for k, v in self._items.items()}
            )
        return list(applied)

    def reconcile(
        self, item_id: str, update: Callable[[ImageItem], ImageItem]
    ) -> bool:
        """基于条目的当前状态回写结果

        Returns:
            bool: 条目仍存在并已更新时为 True
        """
        current = self._items.get(item_id)
        if current is None:
            logger.debug(f"条目已移除，丢弃结果: {item_id}")
            return False
        return bool(self.commit({item_id: update(current)}))

    def _replace(self, items: dict[str, ImageItem]) -> None:
        self._items = items
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"集合变更通知失败: {e}")
