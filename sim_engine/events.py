"""State-change notifications for external observers."""

from dataclasses import dataclass
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateChanged:
    character_id: str
    revision: int
    reason: str


Listener = Callable[[StateChanged], None]


class EventBus:
    """Synchronous fan-out to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: StateChanged) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed for %s", event.reason)
