"""
Full reset of the document store connection.

A reset refreshes the credential, cycles the store's network channel, and
verifies the result with a health check. When verification fails in a way
that points at corrupted local state it escalates once by clearing cached
provider artifacts and verifying again. At most one reset runs at a time;
overlapping requests are dropped.
"""

import asyncio as _asyncio
import logging
from typing import Optional

from .artifact_store import RedisArtifactStore
from .connection_resetter_helpers import (
    RESET_STEP_ERRORS,
    ChannelCycler,
    ResetEscalation,
    ResetResult,
    Sleep,
)
from .connection_state import ConnectionState
from .connection_state_tracker import ConnectionStateTracker, get_connection_state_tracker
from .credential_refresher import CredentialRefresher
from .document_store import DocumentStoreClient
from .exceptions import ResetError
from .health_check import ConnectionHealth, HealthCheckRunner, HealthFailureReason

asyncio = _asyncio  # Exposed for test monkeypatching of asyncio.sleep

logger = logging.getLogger(__name__)


class ConnectionResetter:
    """Serialised disable/enable/verify cycle for the store client."""

    def __init__(
        self,
        client: DocumentStoreClient,
        credential_refresher: CredentialRefresher,
        health_check_runner: HealthCheckRunner,
        *,
        tracker: Optional[ConnectionStateTracker] = None,
        artifact_store: Optional[RedisArtifactStore] = None,
        terminate_client: bool = True,
        disable_settle_seconds: float = 3.0,
        enable_settle_seconds: float = 1.0,
        enable_retry_delay_seconds: float = 2.0,
        sleep: Optional[Sleep] = None,
    ):
        self.client = client
        self.credential_refresher = credential_refresher
        self.health_check_runner = health_check_runner
        self.tracker = tracker if tracker is not None else get_connection_state_tracker()
        self._channel = ChannelCycler(
            client,
            sleep if sleep is not None else self._sleep,
            terminate_client=terminate_client,
            disable_settle_seconds=disable_settle_seconds,
            enable_settle_seconds=enable_settle_seconds,
            enable_retry_delay_seconds=enable_retry_delay_seconds,
        )
        self._escalation = ResetEscalation(credential_refresher, artifact_store)
        self._reset_in_progress = False
        self.last_result: Optional[ResetResult] = None

    @classmethod
    def from_config(
        cls,
        client: DocumentStoreClient,
        credential_refresher: CredentialRefresher,
        health_check_runner: HealthCheckRunner,
        config,
        *,
        tracker: Optional[ConnectionStateTracker] = None,
        artifact_store: Optional[RedisArtifactStore] = None,
    ) -> "ConnectionResetter":
        return cls(
            client,
            credential_refresher,
            health_check_runner,
            tracker=tracker,
            artifact_store=artifact_store,
            terminate_client=config.terminate_client_on_reset,
            disable_settle_seconds=config.disable_settle_seconds,
            enable_settle_seconds=config.enable_settle_seconds,
            enable_retry_delay_seconds=config.enable_retry_delay_seconds,
        )

    @property
    def reset_in_progress(self) -> bool:
        return self._reset_in_progress

    @staticmethod
    async def _sleep(delay: float) -> None:
        await asyncio.sleep(delay)

    async def reset_connection(self, *, strict: bool = False) -> ResetResult:
        """
        Run one reset cycle unless one is already running.

        Never raises for failures inside the cycle; they are logged and end in
        ``INACTIVE``. With ``strict`` an unhealthy outcome raises
        ``ResetError`` after state and the in-progress flag have settled.
        """
        # Check-and-set before the first await keeps this atomic on the loop
        if self._reset_in_progress:
            logger.info("Connection reset already in progress, skipping")
            return ResetResult(performed=False)
        self._reset_in_progress = True

        try:
            result = await self._run_cycle()
        except Exception as exc:  # last line of defence; a reset never propagates
            logger.exception("Connection reset failed unexpectedly")
            health = ConnectionHealth.degraded(HealthFailureReason.GENERIC, str(exc) or exc.__class__.__name__)
            self.tracker.transition(ConnectionState.INACTIVE, "reset failed")
            result = ResetResult(performed=True, health=health)
        finally:
            self._reset_in_progress = False

        self.last_result = result
        if strict and not result.healthy:
            reason = result.health.reason.value if result.health and result.health.reason else None
            raise ResetError(reason=reason)
        return result

    async def _run_cycle(self) -> ResetResult:
        logger.info("Resetting document store connection")
        self.tracker.transition(ConnectionState.RESETTING, "reset started")

        signed_in = self.credential_refresher.has_session()
        if signed_in:
            await self._refresh_credential("before disabling network")

        await self._channel.take_down()
        await self._channel.bring_up()

        if signed_in:
            await self._refresh_credential("after re-enabling network")

        uid = self.credential_refresher.current_uid()
        health = await self.health_check_runner.verify_connection(self.client, uid=uid)
        escalated = False
        if not health.healthy and health.reason is not None and health.reason.escalation_eligible:
            logger.warning("Verification failed (%s); clearing cached provider state", health.reason.value)
            escalated = True
            await self._escalation.run()
            health = await self.health_check_runner.verify_connection(self.client, uid=uid)

        if health.healthy:
            logger.info("Connection reset completed successfully")
            self.tracker.transition(ConnectionState.ACTIVE, "reset verified")
        else:
            logger.error("Connection reset finished unhealthy: %s", health.error)
            self.tracker.transition(ConnectionState.INACTIVE, "reset verification failed")
        return ResetResult(performed=True, health=health, escalated=escalated)

    async def _refresh_credential(self, stage: str) -> None:
        try:
            await self.credential_refresher.refresh_credential(force=True)
        except RESET_STEP_ERRORS as exc:
            logger.warning("Token refresh %s failed: %s", stage, exc)


__all__ = ["ConnectionResetter", "ResetResult"]
