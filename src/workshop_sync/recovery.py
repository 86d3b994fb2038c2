"""
Retry plus targeted recovery for remote store calls.

A call is first retried with backoff. If it still fails, the failure is
classified: credential problems get one forced token refresh, connectivity
problems get one connection reset, and either way the call is tried once
more. Anything else, or a second failure, surfaces the original error.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .connection_resetter import ConnectionResetter
from .connection_resetter_helpers import RESET_STEP_ERRORS
from .credential_refresher import CredentialRefresher
from .error_classifier import ErrorCategory, ErrorClassifier, get_error_classifier
from .exceptions import AuthError
from .retry import RetryCallback, RetryPolicy, with_retry

_ResultT = TypeVar("_ResultT")

logger = logging.getLogger(__name__)

_RESET_CATEGORIES = frozenset({ErrorCategory.CONNECTIVITY, ErrorCategory.TIMEOUT})


class ConnectionRecovery:
    def __init__(
        self,
        credential_refresher: CredentialRefresher,
        resetter: ConnectionResetter,
        *,
        policy: Optional[RetryPolicy] = None,
        classifier: Optional[ErrorClassifier] = None,
        on_retry: Optional[RetryCallback] = None,
    ):
        self.credential_refresher = credential_refresher
        self.resetter = resetter
        self.policy = policy if policy is not None else RetryPolicy()
        self.classifier = classifier or get_error_classifier()
        self.on_retry = on_retry

    async def call(self, operation: Callable[[], Awaitable[_ResultT]], *, context: str = "store operation") -> _ResultT:
        try:
            return await with_retry(operation, policy=self.policy, on_retry=self.on_retry, context=context)
        except Exception as exc:
            original = exc

        category = self.classifier.classify(original)
        if not await self._recover(category, original, context):
            raise original

        logger.info("Retrying %s after %s recovery", context, category.value)
        try:
            return await operation()
        except Exception as retry_exc:
            logger.error("%s failed again after recovery: %s", context, retry_exc)
            raise original from retry_exc

    async def _recover(self, category: ErrorCategory, error: Exception, context: str) -> bool:
        """Run the recovery step for ``category``; returns whether a retry is worthwhile."""
        if category == ErrorCategory.AUTH:
            return await self._refresh_after_auth_failure(error, context)
        if category in _RESET_CATEGORIES:
            logger.warning("%s failed with a connectivity error; resetting connection", context)
            result = await self.resetter.reset_connection()
            # A dropped request means another reset is already fixing the channel
            return not result.performed or result.healthy
        logger.debug("%s failed with %s error; no recovery attempted", context, category.value)
        return False

    async def _refresh_after_auth_failure(self, error: Exception, context: str) -> bool:
        if isinstance(error, AuthError) and error.code == "no-current-user":
            return False
        logger.warning("%s failed with an auth error; forcing token refresh", context)
        try:
            await self.credential_refresher.refresh_credential(force=True)
        except AuthError as refresh_error:
            logger.error("Token refresh after auth failure did not succeed: %s", refresh_error)
            if refresh_error.is_terminal:
                await self._sign_out(refresh_error)
            return False
        except RESET_STEP_ERRORS as refresh_error:
            logger.error("Token refresh after auth failure did not succeed: %s", refresh_error)
            return False
        return True

    async def _sign_out(self, refresh_error: AuthError) -> None:
        try:
            await self.credential_refresher.sign_out_if_terminal(refresh_error)
        except RESET_STEP_ERRORS as exc:
            logger.error("Sign-out after terminal auth error failed: %s", exc)


__all__ = ["ConnectionRecovery"]
