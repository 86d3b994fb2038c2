"""
Canonical connection state definitions.

Single source of truth for the application's view of the remote store
connection, kept separate to prevent circular imports.
"""

from enum import Enum


class ConnectionState(Enum):
    """
    Process-wide view of the document store connection.

    INACTIVE: the store is unreachable or the last recovery attempt failed
    RESETTING: a connection reset is in flight
    ACTIVE: the store answered or reported itself in sync with the server
    """

    INACTIVE = "inactive"
    RESETTING = "resetting"
    ACTIVE = "active"
