"""Observer bookkeeping for connection state changes."""

import logging
from typing import Callable, List

from ..connection_state import ConnectionState

logger = logging.getLogger(__name__)

StateListener = Callable[[ConnectionState, ConnectionState], None]


class SubscriberRegistry:
    """Holds state listeners and fans out notifications."""

    def __init__(self) -> None:
        self._listeners: List[StateListener] = []

    def add(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` and return a handle that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.remove(listener)

        return _unsubscribe

    def remove(self, listener: StateListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("Listener already removed")

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def notify(self, previous: ConnectionState, current: ConnectionState) -> None:
        """Call every listener; a failing listener never blocks the others."""
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:  # listeners are application code
                logger.exception("Connection state listener failed for %s -> %s", previous.value, current.value)
