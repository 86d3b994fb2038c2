"""Credential refresh with a timeout guard and token sanity check."""

import asyncio as _asyncio
import logging
from typing import Optional

from redis.exceptions import RedisError

from .exceptions import AuthError, CredentialTimeoutError
from .identity_provider import IdentityProvider

asyncio = _asyncio

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_REFRESH_TIMEOUT_SECONDS = 10.0
DEFAULT_MIN_TOKEN_LENGTH = 50


class CredentialRefresher:
    """Obtains fresh access tokens from the identity provider."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        *,
        timeout_seconds: float = DEFAULT_TOKEN_REFRESH_TIMEOUT_SECONDS,
        min_token_length: int = DEFAULT_MIN_TOKEN_LENGTH,
    ):
        self.identity_provider = identity_provider
        self.timeout_seconds = timeout_seconds
        self.min_token_length = min_token_length

    @classmethod
    def from_config(cls, identity_provider: IdentityProvider, config) -> "CredentialRefresher":
        return cls(
            identity_provider,
            timeout_seconds=config.token_refresh_timeout_seconds,
            min_token_length=config.min_token_length,
        )

    def has_session(self) -> bool:
        return self.identity_provider.get_current_credential_holder() is not None

    def current_uid(self) -> Optional[str]:
        holder = self.identity_provider.get_current_credential_holder()
        return holder.uid if holder is not None else None

    async def refresh_credential(self, force: bool = False) -> str:
        """
        Return a validated access token for the signed-in user.

        Raises:
            AuthError: No user is signed in, the provider rejected the refresh,
                or the returned token is too short to be genuine.
            CredentialTimeoutError: The provider did not answer within the deadline.
        """
        holder = self.identity_provider.get_current_credential_holder()
        if holder is None:
            logger.info("No user signed in to refresh token")
            raise AuthError("No user signed in", code="no-current-user")

        logger.debug("Refreshing token for user %s (force=%s)", holder.uid, force)
        try:
            token = await asyncio.wait_for(holder.get_token(force_refresh=force), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning("Token refresh timed out after %s seconds", self._format_timeout())
            raise CredentialTimeoutError(
                f"Token refresh timed out after {self._format_timeout()} seconds",
                timeout_seconds=self.timeout_seconds,
            ) from exc
        except AuthError:
            raise
        except (OSError, RedisError, RuntimeError, ValueError) as exc:
            logger.warning("Identity provider rejected token refresh: %s", exc)
            raise AuthError(f"Token refresh failed: {exc}") from exc

        if not token or len(token) < self.min_token_length:
            logger.warning("Refreshed token appears invalid (too short)")
            raise AuthError("Invalid token received during refresh", code="invalid-token")

        logger.debug("Token refreshed for user %s", holder.uid)
        return token

    async def sign_out_if_terminal(self, error: AuthError) -> bool:
        """Sign the user out when ``error`` means the account can no longer be used."""
        if not error.is_terminal:
            return False
        logger.warning("Signing out after terminal auth error: %s", error.code)
        await self.identity_provider.sign_out()
        return True

    def _format_timeout(self) -> str:
        if float(self.timeout_seconds).is_integer():
            return str(int(self.timeout_seconds))
        return str(self.timeout_seconds)


__all__ = ["CredentialRefresher", "DEFAULT_MIN_TOKEN_LENGTH", "DEFAULT_TOKEN_REFRESH_TIMEOUT_SECONDS"]
