"""HTTP calls to the Firebase secure token and identity toolkit endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

import aiohttp

from ..exceptions import AuthError

logger = logging.getLogger(__name__)

SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"
SIGN_IN_WITH_PASSWORD_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

# Provider error messages mapped onto AuthError codes
_PROVIDER_ERROR_CODES = {
    "TOKEN_EXPIRED": "user-token-expired",
    "USER_DISABLED": "user-disabled",
    "USER_NOT_FOUND": "user-not-found",
    "INVALID_REFRESH_TOKEN": "invalid-refresh-token",
    "INVALID_GRANT_TYPE": "invalid-grant-type",
    "MISSING_REFRESH_TOKEN": "invalid-refresh-token",
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
}


def provider_error_code(message: str) -> str:
    """Map ``"USER_DISABLED : The user account has been disabled"`` style messages to a code."""
    head = message.split(":", 1)[0].strip()
    return _PROVIDER_ERROR_CODES.get(head, head.lower().replace("_", "-") or "internal-error")


async def _read_payload(response: aiohttp.ClientResponse) -> Dict[str, Any]:
    try:
        payload = await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        payload = None
    return payload if isinstance(payload, dict) else {}


async def post_to_provider(
    session: aiohttp.ClientSession,
    url: str,
    api_key: str,
    *,
    data: Dict[str, str] | None = None,
    json_body: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """
    POST to a provider endpoint and return the JSON body.

    Raises:
        AuthError: The provider rejected the request.
        ConnectionError: The provider could not be reached.
    """
    try:
        async with session.post(url, params={"key": api_key}, data=data, json=json_body) as response:
            payload = await _read_payload(response)
            if response.status >= 400:
                error = payload.get("error") or {}
                message = str(error.get("message") or f"HTTP {response.status}")
                code = provider_error_code(message)
                logger.warning("Identity provider rejected request (%s): %s", response.status, message)
                raise AuthError(f"Identity provider error: {message}", code=code)
            return payload
    except aiohttp.ClientError as exc:
        raise ConnectionError(f"Identity provider unreachable: {exc}") from exc


async def exchange_refresh_token(session: aiohttp.ClientSession, api_key: str, refresh_token: str) -> Dict[str, Any]:
    """Exchange a refresh token for a new id token."""
    payload = await post_to_provider(
        session,
        SECURE_TOKEN_URL,
        api_key,
        data={"grant_type": "refresh_token", "refresh_token": refresh_token},
    )
    if not payload.get("id_token") or not payload.get("refresh_token"):
        raise AuthError("Identity provider returned an incomplete token response", code="internal-error")
    return payload


async def sign_in_with_password(session: aiohttp.ClientSession, api_key: str, email: str, password: str) -> Dict[str, Any]:
    payload = await post_to_provider(
        session,
        SIGN_IN_WITH_PASSWORD_URL,
        api_key,
        json_body={"email": email, "password": password, "returnSecureToken": True},
    )
    if not payload.get("idToken") or not payload.get("localId"):
        raise AuthError("Identity provider returned an incomplete sign-in response", code="internal-error")
    return payload
