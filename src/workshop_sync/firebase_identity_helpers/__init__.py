"""Helpers for the Firebase identity adapter."""

from .session_record import TOKEN_EXPIRY_MARGIN_SECONDS, FirebaseSessionRecord, session_storage_key
from .token_endpoint import (
    SECURE_TOKEN_URL,
    SIGN_IN_WITH_PASSWORD_URL,
    exchange_refresh_token,
    provider_error_code,
    sign_in_with_password,
)

__all__ = [
    "SECURE_TOKEN_URL",
    "SIGN_IN_WITH_PASSWORD_URL",
    "TOKEN_EXPIRY_MARGIN_SECONDS",
    "FirebaseSessionRecord",
    "exchange_refresh_token",
    "provider_error_code",
    "session_storage_key",
    "sign_in_with_password",
]
