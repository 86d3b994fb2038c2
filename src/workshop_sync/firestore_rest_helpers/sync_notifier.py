"""Dispatches "in sync with server" events to registered listeners."""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

SyncListener = Callable[[], None]


class SyncNotifier:
    def __init__(self) -> None:
        self._listeners: List[SyncListener] = []

    def add(self, listener: SyncListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def __len__(self) -> int:
        return len(self._listeners)

    def notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:  # listeners are application code
                logger.exception("Sync listener failed")


__all__ = ["SyncListener", "SyncNotifier"]
