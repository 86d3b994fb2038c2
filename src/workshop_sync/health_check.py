"""Sentinel-document health check with failure classification."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, NamedTuple, Optional

from .document_store import DocumentStoreClient, document_path
from .error_classifier import ErrorCategory, ErrorClassifier, get_error_classifier

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL_PATH = "system_health_checks/connection_test"


class HealthFailureReason(Enum):
    PERMISSION = "permission"
    UNAVAILABLE = "unavailable"
    QUOTA = "quota"
    AUTH = "auth"
    GENERIC = "generic"

    @property
    def escalation_eligible(self) -> bool:
        return self in (HealthFailureReason.UNAVAILABLE, HealthFailureReason.AUTH)

    @property
    def retryable(self) -> bool:
        return self not in (HealthFailureReason.PERMISSION, HealthFailureReason.QUOTA)


_CATEGORY_REASONS = {
    ErrorCategory.PERMISSION: HealthFailureReason.PERMISSION,
    ErrorCategory.QUOTA: HealthFailureReason.QUOTA,
    ErrorCategory.CONNECTIVITY: HealthFailureReason.UNAVAILABLE,
    ErrorCategory.TIMEOUT: HealthFailureReason.UNAVAILABLE,
    ErrorCategory.AUTH: HealthFailureReason.AUTH,
    ErrorCategory.GENERIC: HealthFailureReason.GENERIC,
}


class ConnectionHealth(NamedTuple):
    """Outcome of a verification read."""

    healthy: bool
    reason: Optional[HealthFailureReason] = None
    error: Optional[str] = None
    details: Optional[dict[str, Any]] = None

    @classmethod
    def ok(cls, **details: Any) -> "ConnectionHealth":
        return cls(True, details=details or None)

    @classmethod
    def degraded(cls, reason: HealthFailureReason, error: str) -> "ConnectionHealth":
        return cls(False, reason=reason, error=error)


class HealthCheckRunner:
    """Reads a well-known document to verify the store channel works."""

    def __init__(
        self,
        sentinel_path: str = DEFAULT_SENTINEL_PATH,
        *,
        fallback_to_user_document: bool = True,
        classifier: Optional[ErrorClassifier] = None,
    ):
        self.sentinel_path = sentinel_path
        self.fallback_to_user_document = fallback_to_user_document
        self.classifier = classifier or get_error_classifier()
        self.consecutive_failures = 0
        self.last_success_time = 0.0
        self.last_result: Optional[ConnectionHealth] = None

    @classmethod
    def from_config(cls, config) -> "HealthCheckRunner":
        return cls(config.sentinel_path, fallback_to_user_document=config.fallback_to_user_document)

    async def verify_connection(self, client: DocumentStoreClient, *, uid: Optional[str] = None) -> ConnectionHealth:
        """
        Perform one sentinel read and classify any failure.

        When the sentinel read fails generically and ``uid`` is given, the
        user's own document is read instead; some rule sets only allow that.
        """
        try:
            await client.get_document(self.sentinel_path)
        except Exception as exc:
            result = self._classify_failure(exc)
            if not result.healthy and self._should_try_user_document(result, uid):
                result = await self._verify_user_document(client, uid)
        else:
            result = ConnectionHealth.ok(path=self.sentinel_path)

        self._record(result)
        return result

    def _should_try_user_document(self, result: ConnectionHealth, uid: Optional[str]) -> bool:
        return self.fallback_to_user_document and uid is not None and result.reason == HealthFailureReason.GENERIC

    async def _verify_user_document(self, client: DocumentStoreClient, uid: Optional[str]) -> ConnectionHealth:
        path = document_path("users", uid)
        logger.debug("Sentinel read failed; verifying with %s", path)
        try:
            await client.get_document(path)
        except Exception as exc:
            return self._classify_failure(exc)
        return ConnectionHealth.ok(path=path)

    def _classify_failure(self, error: Exception) -> ConnectionHealth:
        category = self.classifier.classify(error)
        reason = _CATEGORY_REASONS[category]
        message = str(error) or error.__class__.__name__

        if reason == HealthFailureReason.PERMISSION:
            logger.error("Health check denied by security rules; check and redeploy the store rules: %s", message)
        elif reason == HealthFailureReason.QUOTA:
            logger.error("Health check failed: store quota exceeded; check the project billing plan: %s", message)
        elif reason.escalation_eligible:
            logger.warning("Health check failed (%s): %s", reason.value, message)
        else:
            logger.warning("Health check failed with unexpected error: %s", message)
        return ConnectionHealth.degraded(reason, message)

    def _record(self, result: ConnectionHealth) -> None:
        self.last_result = result
        if result.healthy:
            self.consecutive_failures = 0
            self.last_success_time = time.time()
        else:
            self.consecutive_failures += 1


__all__ = ["ConnectionHealth", "HealthCheckRunner", "HealthFailureReason"]
