"""User-facing wording for store failures that reach the application."""

from enum import Enum
from typing import NamedTuple

from .error_classifier import ErrorCategory, ErrorClassifier, get_error_classifier
from .exceptions import AuthError


class NoticeSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class UserNotice(NamedTuple):
    message: str
    severity: NoticeSeverity
    dismissible: bool
    retryable: bool


_NOTICES = {
    ErrorCategory.CONNECTIVITY: UserNotice(
        "Connection to the server was lost. We'll keep trying to reconnect.",
        NoticeSeverity.WARNING,
        dismissible=True,
        retryable=True,
    ),
    ErrorCategory.TIMEOUT: UserNotice(
        "The server is taking too long to respond. Please try again.",
        NoticeSeverity.WARNING,
        dismissible=True,
        retryable=True,
    ),
    ErrorCategory.AUTH: UserNotice(
        "Your session has expired. Please sign in again.",
        NoticeSeverity.WARNING,
        dismissible=False,
        retryable=False,
    ),
    ErrorCategory.PERMISSION: UserNotice(
        "You don't have permission to access this data.",
        NoticeSeverity.ERROR,
        dismissible=False,
        retryable=False,
    ),
    ErrorCategory.QUOTA: UserNotice(
        "The service is temporarily over capacity. Please try again later.",
        NoticeSeverity.ERROR,
        dismissible=False,
        retryable=False,
    ),
    ErrorCategory.GENERIC: UserNotice(
        "Something went wrong. Please try again.",
        NoticeSeverity.ERROR,
        dismissible=True,
        retryable=True,
    ),
}

_SIGNED_OUT_NOTICE = UserNotice(
    "Please sign in to continue.",
    NoticeSeverity.INFO,
    dismissible=False,
    retryable=False,
)


def describe_error(error: BaseException, classifier: ErrorClassifier | None = None) -> UserNotice:
    """Pick the notice for ``error``; transient problems get a dismissible banner with retry."""
    if isinstance(error, AuthError) and error.code == "no-current-user":
        return _SIGNED_OUT_NOTICE
    category = (classifier or get_error_classifier()).classify(error)
    return _NOTICES[category]


__all__ = ["NoticeSeverity", "UserNotice", "describe_error"]
