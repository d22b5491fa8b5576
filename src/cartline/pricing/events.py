"""Change notifications emitted when an item's identity is regenerated."""

from __future__ import annotations

from typing import Any, Callable, List

from ..utils.logging import get_logger

logger = get_logger(__name__)

Observer = Callable[[Any, str], Any]


class ItemObservers:
    """Ordered list of callbacks invoked with ``(item, new_hash)``.

    Delivery is synchronous and in registration order. Return values are
    ignored; an observer that raises aborts the mutation that triggered it.
    """

    def __init__(self) -> None:
        self._observers: List[Observer] = []

    def subscribe(self, observer: Observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def notify(self, item: Any, new_hash: str) -> None:
        logger.debug(f"Item {item.id!r} rehashed to {new_hash}, notifying {len(self._observers)} observer(s)")
        for observer in list(self._observers):
            observer(item, new_hash)

    def __len__(self) -> int:
        return len(self._observers)
