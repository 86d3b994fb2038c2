"""Common exception classes for the connection recovery library.

All custom exceptions inherit from ``ApplicationError`` to keep a consistent
hierarchy. Exception classes support two patterns:

1. No-argument raise: ``raise ConnectivityError()``
2. Contextual attributes: ``err = StoreError("boom", path="users/u1"); raise err``
"""

from typing import Any

from ..config.errors import ConfigurationError


class ApplicationError(Exception):
    """Base exception for all library errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Application error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


from .auth import AuthError, CredentialTimeoutError  # noqa: E402
from .store import (  # noqa: E402
    ConnectivityError,
    QuotaExceededError,
    ResetError,
    StoreError,
    StorePermissionError,
)

__all__ = [
    "ApplicationError",
    "AuthError",
    "ConfigurationError",
    "ConnectivityError",
    "CredentialTimeoutError",
    "QuotaExceededError",
    "ResetError",
    "StoreError",
    "StorePermissionError",
]
