"""Outcome of one reset request."""

from typing import NamedTuple, Optional

from ..health_check import ConnectionHealth


class ResetResult(NamedTuple):
    """
    ``performed`` is False when the request was dropped because another reset
    was already running; ``health`` is the final verification otherwise.
    """

    performed: bool
    health: Optional[ConnectionHealth] = None
    escalated: bool = False

    @property
    def healthy(self) -> bool:
        return self.health is not None and self.health.healthy


__all__ = ["ResetResult"]
