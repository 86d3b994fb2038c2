"""Helpers for error classification."""

from .code_extractor import extract_error_code, extract_error_message
from .patterns import CODE_CATEGORIES, MESSAGE_PATTERNS, ErrorCategory, compile_patterns

__all__ = [
    "CODE_CATEGORIES",
    "MESSAGE_PATTERNS",
    "ErrorCategory",
    "compile_patterns",
    "extract_error_code",
    "extract_error_message",
]
