"""Bounded record of recent connection state transitions."""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from ..connection_state import ConnectionState


@dataclass(frozen=True)
class ConnectionTransition:
    """One state change, kept for diagnostics."""

    previous: ConnectionState
    current: ConnectionState
    reason: Optional[str]
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous": self.previous.value,
            "current": self.current.value,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }


class TransitionHistory:
    """Keeps the most recent ``max_entries`` transitions, oldest first."""

    def __init__(self, max_entries: int = 50) -> None:
        self._entries: Deque[ConnectionTransition] = deque(maxlen=max_entries)

    def record(self, transition: ConnectionTransition) -> None:
        self._entries.append(transition)

    def recent(self, limit: Optional[int] = None) -> List[ConnectionTransition]:
        entries = list(self._entries)
        if limit is not None:
            return entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        self._entries.clear()
