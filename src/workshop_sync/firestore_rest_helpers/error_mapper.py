"""Translate Firestore REST failures into the library's exception hierarchy."""

from typing import Any, Dict, Optional

from ..exceptions import (
    AuthError,
    ConnectivityError,
    QuotaExceededError,
    StoreError,
    StorePermissionError,
)

# google.rpc.Code names as reported in the error body's ``status`` field
_STATUS_CODES = {
    "INVALID_ARGUMENT": "invalid-argument",
    "FAILED_PRECONDITION": "failed-precondition",
    "UNAUTHENTICATED": "unauthenticated",
    "PERMISSION_DENIED": "permission-denied",
    "NOT_FOUND": "not-found",
    "ALREADY_EXISTS": "already-exists",
    "RESOURCE_EXHAUSTED": "resource-exhausted",
    "ABORTED": "aborted",
    "UNAVAILABLE": "unavailable",
    "DEADLINE_EXCEEDED": "deadline-exceeded",
    "INTERNAL": "internal",
}

_HTTP_CODES = {
    400: "invalid-argument",
    401: "unauthenticated",
    403: "permission-denied",
    404: "not-found",
    409: "aborted",
    429: "resource-exhausted",
    500: "internal",
    503: "unavailable",
    504: "deadline-exceeded",
}


def error_details(payload: Optional[Dict[str, Any]]) -> tuple[Optional[str], Optional[str]]:
    """Return ``(status, message)`` from a ``{"error": {...}}`` body."""
    if not isinstance(payload, dict):
        return None, None
    error = payload.get("error")
    if isinstance(error, list) and error:
        error = error[0].get("error") if isinstance(error[0], dict) else None
    if not isinstance(error, dict):
        return None, None
    status = error.get("status")
    message = error.get("message")
    return (str(status) if status else None, str(message) if message else None)


def map_http_error(status: int, payload: Optional[Dict[str, Any]], *, operation: str, path: str) -> Exception:
    """Build the exception for a non-2xx Firestore response."""
    rpc_status, provider_message = error_details(payload)
    code = _STATUS_CODES.get(rpc_status or "") or _HTTP_CODES.get(status, "unknown")
    message = f"Failed to {operation} document {path}: HTTP {status}"
    if provider_message:
        message = f"{message} {provider_message}"

    if status == 401 or code == "unauthenticated":
        return AuthError(message, code="unauthenticated")
    if status == 403 or code == "permission-denied":
        return StorePermissionError(message, status=status, path=path)
    if status == 429 or code == "resource-exhausted":
        return QuotaExceededError(message, status=status, path=path)
    if status in (502, 503, 504) or code in ("unavailable", "deadline-exceeded"):
        return ConnectivityError(message, code=code, status=status, path=path)
    return StoreError(message, code=code, status=status, path=path)


def offline_error(operation: str, path: str) -> ConnectivityError:
    return ConnectivityError(f"Failed to {operation} document because the client is offline", path=path)


__all__ = ["error_details", "map_http_error", "offline_error"]
