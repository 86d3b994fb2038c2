"""Status codes and message patterns used to classify store failures."""

import re
from enum import Enum
from typing import Dict, List, Tuple


class ErrorCategory(Enum):
    """Recovery-relevant categories for remote call failures."""

    AUTH = "auth"
    TIMEOUT = "timeout"
    CONNECTIVITY = "connectivity"
    PERMISSION = "permission"
    QUOTA = "quota"
    GENERIC = "generic"


# Canonical status names reported by the store and identity provider
CODE_CATEGORIES: Dict[str, ErrorCategory] = {
    "permission-denied": ErrorCategory.PERMISSION,
    "resource-exhausted": ErrorCategory.QUOTA,
    "unavailable": ErrorCategory.CONNECTIVITY,
    "deadline-exceeded": ErrorCategory.TIMEOUT,
    "unauthenticated": ErrorCategory.AUTH,
    "invalid-argument": ErrorCategory.AUTH,
    "user-token-expired": ErrorCategory.AUTH,
    "user-disabled": ErrorCategory.AUTH,
    "user-not-found": ErrorCategory.AUTH,
    "invalid-refresh-token": ErrorCategory.AUTH,
    "no-current-user": ErrorCategory.AUTH,
}

# Checked in order; the first category with a matching pattern wins
MESSAGE_PATTERNS: List[Tuple[ErrorCategory, Tuple[str, ...]]] = [
    (ErrorCategory.PERMISSION, (r"permission[- ]denied", r"missing or insufficient permissions")),
    (ErrorCategory.QUOTA, (r"resource[- ]exhausted", r"quota", r"too many requests")),
    (ErrorCategory.TIMEOUT, (r"timed out", r"timeout", r"deadline")),
    (ErrorCategory.CONNECTIVITY, (r"offline", r"unavailable", r"network", r"connection (reset|refused|closed|lost)")),
    (ErrorCategory.AUTH, (r"\b40[01]\b", r"\b403\b", r"token", r"unauthenticated", r"\bauth")),
]


def compile_patterns() -> List[Tuple[ErrorCategory, List[re.Pattern]]]:
    return [
        (category, [re.compile(pattern, re.IGNORECASE) for pattern in patterns])
        for category, patterns in MESSAGE_PATTERNS
    ]
