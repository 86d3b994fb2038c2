"""Document store exceptions.

``code`` follows the store's canonical status names (``unavailable``,
``permission-denied``, ``resource-exhausted``, ...) so classification does not
depend on message wording alone.
"""

from typing import Optional

from . import ApplicationError


class StoreError(ApplicationError):
    """Document store request failed."""

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status: Optional[int] = None,
        path: Optional[str] = None,
    ) -> None:
        if not message:
            message = "Document store request failed"
        super().__init__(message)
        self.code = code
        self.status = status
        self.path = path


class ConnectivityError(StoreError):
    """Document store is unreachable or the client is offline."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("code", "unavailable")
        super().__init__(message or "Document store is unreachable or the client is offline", **kwargs)


class StorePermissionError(StoreError):
    """Security rules rejected the request."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("code", "permission-denied")
        super().__init__(message or "Security rules rejected the request", **kwargs)


class QuotaExceededError(StoreError):
    """Project quota exhausted."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("code", "resource-exhausted")
        super().__init__(message or "Project quota exhausted", **kwargs)


class ResetError(ApplicationError):
    """Connection reset finished without a healthy connection."""

    def __init__(self, message: str = "", *, reason: Optional[str] = None) -> None:
        if not message:
            message = "Connection reset finished without a healthy connection"
            if reason:
                message += f" ({reason})"
        super().__init__(message)
        self.reason = reason


__all__ = [
    "ConnectivityError",
    "QuotaExceededError",
    "ResetError",
    "StoreError",
    "StorePermissionError",
]
