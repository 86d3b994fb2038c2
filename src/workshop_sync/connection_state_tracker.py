"""Process-wide connection state machine with an observer interface."""

import logging
import time as _time
from typing import Callable, List, Optional

from .connection_state import ConnectionState
from .connection_state_tracker_helpers import (
    ConnectionTransition,
    StateListener,
    SubscriberRegistry,
    TransitionHistory,
)

logger = logging.getLogger(__name__)
time = _time  # Exposed for test monkeypatching of time.time


class ConnectionStateTracker:
    """Owns the current ConnectionState and tells subscribers when it changes."""

    def __init__(self, history_size: int = 50):
        self._state = ConnectionState.INACTIVE
        self._state_change_time = time.time()
        self._subscribers = SubscriberRegistry()
        self._history = TransitionHistory(history_size)
        self.initialized = False

    def initialize(self) -> None:
        """Start tracking for the application lifetime."""
        if self.initialized:
            return
        self._state = ConnectionState.INACTIVE
        self._state_change_time = time.time()
        self.initialized = True
        logger.debug("Connection state tracker initialized")

    def shutdown(self) -> None:
        """Drop subscribers and history at application shutdown."""
        self._subscribers.clear()
        self._history.clear()
        self.initialized = False
        logger.debug("Connection state tracker shut down")

    @property
    def state(self) -> ConnectionState:
        return self._state

    def get_state_duration(self) -> float:
        """Seconds spent in the current state."""
        return time.time() - self._state_change_time

    def transition(self, new_state: ConnectionState, reason: Optional[str] = None) -> bool:
        """Move to ``new_state``; returns False when already there."""
        if new_state == self._state:
            return False

        previous = self._state
        self._state = new_state
        self._state_change_time = time.time()
        self._history.record(
            ConnectionTransition(previous=previous, current=new_state, reason=reason, timestamp=self._state_change_time)
        )
        if reason:
            logger.info("Connection state: %s -> %s (%s)", previous.value, new_state.value, reason)
        else:
            logger.info("Connection state: %s -> %s", previous.value, new_state.value)
        self._subscribers.notify(previous, new_state)
        return True

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener(previous, current)``; returns an unsubscribe handle."""
        return self._subscribers.add(listener)

    def recent_transitions(self, limit: Optional[int] = None) -> List[ConnectionTransition]:
        return self._history.recent(limit)


_connection_state_tracker: Optional[ConnectionStateTracker] = None


def get_connection_state_tracker() -> ConnectionStateTracker:
    """Get the process-wide tracker, creating and initializing it on first use."""
    global _connection_state_tracker
    if _connection_state_tracker is None:
        _connection_state_tracker = ConnectionStateTracker()
        _connection_state_tracker.initialize()
    return _connection_state_tracker


def reset_connection_state_tracker() -> None:
    """Shut down and forget the process-wide tracker."""
    global _connection_state_tracker
    if _connection_state_tracker is not None:
        _connection_state_tracker.shutdown()
    _connection_state_tracker = None


__all__ = [
    "ConnectionStateTracker",
    "ConnectionTransition",
    "get_connection_state_tracker",
    "reset_connection_state_tracker",
]
