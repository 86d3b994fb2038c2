"""
Classification of remote call failures into recovery categories.

The category decides what the recovery pipeline does next: refresh the
credential, reset the connection, or surface the error untouched.
"""

import asyncio
import logging
import re
from typing import List, Optional, Tuple

from .error_classifier_helpers import (
    CODE_CATEGORIES,
    ErrorCategory,
    compile_patterns,
    extract_error_code,
    extract_error_message,
)
from .exceptions import (
    AuthError,
    ConnectivityError,
    QuotaExceededError,
    StorePermissionError,
)

logger = logging.getLogger(__name__)

# Categories eligible for the resetter's one-shot escalation
ESCALATION_CATEGORIES = frozenset({ErrorCategory.CONNECTIVITY, ErrorCategory.AUTH})
# Categories that are never retried automatically
NON_TRANSIENT_CATEGORIES = frozenset({ErrorCategory.PERMISSION, ErrorCategory.QUOTA})


class ErrorClassifier:
    """Maps exceptions to an ErrorCategory by type, then status code, then message."""

    def __init__(self) -> None:
        self._compiled: List[Tuple[ErrorCategory, List[re.Pattern]]] = compile_patterns()

    def classify(self, error: BaseException) -> ErrorCategory:
        category = self._classify_by_type(error)
        if category is None:
            category = self._classify_by_code(error)
        if category is None:
            category = self._classify_by_message(extract_error_message(error))
        logger.debug("Classified %s as %s", error.__class__.__name__, category.value)
        return category

    def _classify_by_type(self, error: BaseException) -> Optional[ErrorCategory]:
        if isinstance(error, StorePermissionError):
            return ErrorCategory.PERMISSION
        if isinstance(error, QuotaExceededError):
            return ErrorCategory.QUOTA
        if isinstance(error, ConnectivityError):
            return ErrorCategory.CONNECTIVITY
        if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
            return ErrorCategory.TIMEOUT
        if isinstance(error, AuthError):
            return ErrorCategory.AUTH
        if isinstance(error, ConnectionError):
            return ErrorCategory.CONNECTIVITY
        return None

    def _classify_by_code(self, error: BaseException) -> Optional[ErrorCategory]:
        code = extract_error_code(error)
        if code is None:
            return None
        return CODE_CATEGORIES.get(code)

    def _classify_by_message(self, message: str) -> ErrorCategory:
        for category, patterns in self._compiled:
            if any(pattern.search(message) for pattern in patterns):
                return category
        return ErrorCategory.GENERIC

    def is_escalation_candidate(self, error: BaseException) -> bool:
        """True for auth/connectivity corruption the resetter should escalate on."""
        return self.classify(error) in ESCALATION_CATEGORIES

    def is_transient(self, error: BaseException) -> bool:
        return self.classify(error) in {ErrorCategory.CONNECTIVITY, ErrorCategory.TIMEOUT}


_error_classifier: Optional[ErrorClassifier] = None


def get_error_classifier() -> ErrorClassifier:
    """Get the shared classifier instance."""
    global _error_classifier
    if _error_classifier is None:
        _error_classifier = ErrorClassifier()
    return _error_classifier


def classify_error(error: BaseException) -> ErrorCategory:
    return get_error_classifier().classify(error)


__all__ = [
    "ESCALATION_CATEGORIES",
    "NON_TRANSIENT_CATEGORIES",
    "ErrorCategory",
    "ErrorClassifier",
    "classify_error",
    "get_error_classifier",
]
