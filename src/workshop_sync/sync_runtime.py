"""Wires the recovery components together for one application process."""

import logging
from typing import Any, Dict, Optional

from .artifact_store import RedisArtifactStore
from .connection_config import ConnectionConfig, ProviderConfig, get_connection_config, get_provider_config
from .connection_resetter import ConnectionResetter, ResetResult
from .connection_state import ConnectionState
from .connection_state_tracker import ConnectionStateTracker
from .connectivity_probe import ConnectivityProbe
from .credential_refresher import CredentialRefresher
from .document_store import DocumentStoreClient
from .event_listeners import ConnectivityEventListeners
from .firebase_identity_provider import FirebaseIdentityProvider
from .firestore_rest_client import FirestoreRestClient
from .health_check import ConnectionHealth, HealthCheckRunner
from .identity_provider import IdentityProvider
from .network_status import NetworkStatus, NetworkStatusPoller
from .recovery import ConnectionRecovery
from .retry import RetryPolicy
from .workshop_store import WorkshopStore

logger = logging.getLogger(__name__)


class SyncRuntime:
    """Owns every component and their start/stop order."""

    def __init__(
        self,
        *,
        identity_provider: IdentityProvider,
        client: DocumentStoreClient,
        tracker: ConnectionStateTracker,
        network_status: NetworkStatus,
        credential_refresher: CredentialRefresher,
        health_check_runner: HealthCheckRunner,
        resetter: ConnectionResetter,
        recovery: ConnectionRecovery,
        poller: Optional[NetworkStatusPoller] = None,
        artifact_store: Optional[RedisArtifactStore] = None,
    ):
        self.identity_provider = identity_provider
        self.client = client
        self.tracker = tracker
        self.network_status = network_status
        self.credential_refresher = credential_refresher
        self.health_check_runner = health_check_runner
        self.resetter = resetter
        self.recovery = recovery
        self.poller = poller
        self.artifact_store = artifact_store
        self.probe = ConnectivityProbe(network_status)
        self.listeners = ConnectivityEventListeners(network_status, client, resetter, self.probe, tracker=tracker)
        self.workshops = WorkshopStore(client, recovery)
        self.started = False

    @classmethod
    def from_config(
        cls,
        config: Optional[ConnectionConfig] = None,
        provider_config: Optional[ProviderConfig] = None,
    ) -> "SyncRuntime":
        config = config if config is not None else get_connection_config()
        provider_config = provider_config if provider_config is not None else get_provider_config()
        provider_config.require_credentials()

        artifact_store = RedisArtifactStore.from_url(provider_config.redis_url, key_substrings=config.artifact_key_substrings)
        identity_provider = FirebaseIdentityProvider(
            provider_config.api_key,
            artifact_store=artifact_store,
            request_timeout_seconds=config.request_timeout_seconds,
        )

        async def _current_token() -> Optional[str]:
            holder = identity_provider.get_current_credential_holder()
            if holder is None:
                return None
            return await holder.get_token()

        client = FirestoreRestClient.from_config(provider_config, config, _current_token)
        tracker = ConnectionStateTracker(config.transition_history_size)
        network_status = NetworkStatus()
        credential_refresher = CredentialRefresher.from_config(identity_provider, config)
        health_check_runner = HealthCheckRunner.from_config(config)
        resetter = ConnectionResetter.from_config(
            client,
            credential_refresher,
            health_check_runner,
            config,
            tracker=tracker,
            artifact_store=artifact_store,
        )
        recovery = ConnectionRecovery(credential_refresher, resetter, policy=RetryPolicy.from_config(config))
        return cls(
            identity_provider=identity_provider,
            client=client,
            tracker=tracker,
            network_status=network_status,
            credential_refresher=credential_refresher,
            health_check_runner=health_check_runner,
            resetter=resetter,
            recovery=recovery,
            poller=NetworkStatusPoller.from_config(network_status, config),
            artifact_store=artifact_store,
        )

    async def start(self) -> ConnectionHealth:
        """Install listeners, verify the connection once, then start polling network status."""
        self.tracker.initialize()
        if isinstance(self.identity_provider, FirebaseIdentityProvider):
            await self.identity_provider.restore_session()
        self.listeners.install()

        health = await self.check_health()
        if self.poller is not None:
            self.poller.start()
        self.started = True
        logger.info("Sync runtime started (connection %s)", self.tracker.state.value)
        return health

    async def check_health(self) -> ConnectionHealth:
        """
        Verify the connection once; an offline or auth-suspect failure triggers a reset.

        Returns the reset's final verification when a reset ran, otherwise the
        sentinel read's own result.
        """
        health = await self.health_check_runner.verify_connection(self.client, uid=self.credential_refresher.current_uid())
        if health.healthy:
            self.tracker.transition(ConnectionState.ACTIVE, "health check passed")
            return health

        self.tracker.transition(ConnectionState.INACTIVE, "health check failed")
        if health.reason is None or not health.reason.escalation_eligible:
            return health

        logger.warning("Health check failed (%s); resetting connection", health.reason.value)
        result = await self.resetter.reset_connection()
        if not result.performed or result.health is None:
            return health
        return result.health

    async def reset(self) -> ResetResult:
        return await self.resetter.reset_connection()

    async def shutdown(self) -> None:
        await self.listeners.shutdown()
        if self.poller is not None:
            await self.poller.stop()
        if isinstance(self.client, FirestoreRestClient):
            await self.client.close()
        if isinstance(self.identity_provider, FirebaseIdentityProvider):
            await self.identity_provider.close()
        if self.artifact_store is not None:
            await self.artifact_store.close()
        self.tracker.shutdown()
        self.started = False
        logger.info("Sync runtime shut down")

    def status_report(self) -> Dict[str, Any]:
        last_health = self.health_check_runner.last_result
        return {
            "online": self.network_status.online,
            "uid": self.credential_refresher.current_uid(),
            "state": self.tracker.state.value,
            "state_duration_seconds": round(self.tracker.get_state_duration(), 3),
            "reset_in_progress": self.resetter.reset_in_progress,
            "consecutive_failures": self.health_check_runner.consecutive_failures,
            "last_health": None
            if last_health is None
            else {
                "healthy": last_health.healthy,
                "reason": last_health.reason.value if last_health.reason else None,
                "error": last_health.error,
            },
            "recent_transitions": [transition.to_dict() for transition in self.tracker.recent_transitions(10)],
        }


__all__ = ["SyncRuntime"]
