"""Identity provider exceptions."""

from typing import Optional

from . import ApplicationError

TERMINAL_AUTH_CODES = frozenset(
    {
        "user-disabled",
        "user-token-expired",
        "user-not-found",
        "invalid-refresh-token",
    }
)


class AuthError(ApplicationError):
    """Credential rejected or expired."""

    def __init__(self, message: str = "", *, code: Optional[str] = None) -> None:
        if not message:
            message = "Credential rejected or expired"
        super().__init__(message)
        self.code = code

    @property
    def is_terminal(self) -> bool:
        """True when the account itself is unusable and the user must sign in again."""
        return self.code in TERMINAL_AUTH_CODES


class CredentialTimeoutError(ApplicationError, TimeoutError):
    """Credential refresh exceeded its deadline."""

    def __init__(self, message: str = "", *, timeout_seconds: Optional[float] = None) -> None:
        if not message:
            message = "Credential refresh exceeded its deadline"
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


__all__ = ["AuthError", "CredentialTimeoutError", "TERMINAL_AUTH_CODES"]
