"""Helpers for ConnectionStateTracker."""

from .subscriber_registry import StateListener, SubscriberRegistry
from .transition_history import ConnectionTransition, TransitionHistory

__all__ = ["ConnectionTransition", "StateListener", "SubscriberRegistry", "TransitionHistory"]
