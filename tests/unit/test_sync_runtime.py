from unittest.mock import AsyncMock, MagicMock

import pytest

from workshop_sync.config import ConfigurationError
from workshop_sync.connection_config import ConnectionConfig, ProviderConfig
from workshop_sync.connection_resetter import ConnectionResetter
from workshop_sync.connection_state import ConnectionState
from workshop_sync.credential_refresher import CredentialRefresher
from workshop_sync.exceptions import ConnectivityError, StorePermissionError
from workshop_sync.firebase_identity_provider import FirebaseIdentityProvider
from workshop_sync.firestore_rest_client import FirestoreRestClient
from workshop_sync.health_check import HealthCheckRunner, HealthFailureReason
from workshop_sync.network_status import NetworkStatus
from workshop_sync.recovery import ConnectionRecovery
from workshop_sync.sync_runtime import SyncRuntime


@pytest.fixture
def runtime_parts(fake_store, identity_provider, tracker, fake_sleep):
    refresher = CredentialRefresher(identity_provider)
    runner = HealthCheckRunner("system_health_checks/connection_test")
    resetter = ConnectionResetter(fake_store, refresher, runner, tracker=tracker, sleep=fake_sleep)
    return {
        "identity_provider": identity_provider,
        "client": fake_store,
        "tracker": tracker,
        "network_status": NetworkStatus(),
        "credential_refresher": refresher,
        "health_check_runner": runner,
        "resetter": resetter,
        "recovery": ConnectionRecovery(refresher, resetter),
    }


@pytest.mark.asyncio
async def test_start_installs_listeners_and_marks_active(runtime_parts, fake_store):
    poller = MagicMock()
    poller.stop = AsyncMock()
    runtime = SyncRuntime(poller=poller, **runtime_parts)

    health = await runtime.start()

    assert health.healthy
    assert runtime.started
    assert runtime.tracker.state is ConnectionState.ACTIVE
    assert runtime.listeners.installed
    assert runtime.network_status.listener_count("online") == 1
    assert fake_store.sync_listener_count == 1
    poller.start.assert_called_once()

    await runtime.shutdown()

    assert not runtime.started
    assert not runtime.listeners.installed
    assert fake_store.sync_listener_count == 0
    poller.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_health_check_marks_inactive(runtime_parts, fake_store):
    fake_store.read_failures["system_health_checks/connection_test"] = [StorePermissionError()]
    runtime = SyncRuntime(**runtime_parts)

    health = await runtime.start()

    assert not health.healthy
    assert health.reason is HealthFailureReason.PERMISSION
    assert runtime.tracker.state is ConnectionState.INACTIVE
    assert "disable" not in fake_store.calls
    await runtime.shutdown()


@pytest.mark.asyncio
async def test_offline_health_check_resets_connection(runtime_parts, fake_store):
    fake_store.read_failures["system_health_checks/connection_test"] = [
        ConnectivityError("Failed to get document because the client is offline")
    ]
    runtime = SyncRuntime(**runtime_parts)

    health = await runtime.start()

    assert health.healthy
    assert "disable" in fake_store.calls
    assert "enable" in fake_store.calls
    assert runtime.tracker.state is ConnectionState.ACTIVE
    assert [(t.previous, t.current) for t in runtime.tracker.recent_transitions()] == [
        (ConnectionState.INACTIVE, ConnectionState.RESETTING),
        (ConnectionState.RESETTING, ConnectionState.ACTIVE),
    ]
    await runtime.shutdown()


@pytest.mark.asyncio
async def test_offline_health_check_reports_reset_outcome(runtime_parts, fake_store):
    fake_store.read_failures["system_health_checks/connection_test"] = [ConnectivityError(), ConnectivityError(), ConnectivityError()]
    runtime = SyncRuntime(**runtime_parts)

    health = await runtime.check_health()

    assert not health.healthy
    assert health.reason is HealthFailureReason.UNAVAILABLE
    assert fake_store.calls.count("disable") == 1
    assert runtime.resetter.last_result.escalated is True
    assert runtime.tracker.state is ConnectionState.INACTIVE


@pytest.mark.asyncio
async def test_status_report_summarises_state(runtime_parts):
    runtime = SyncRuntime(**runtime_parts)
    await runtime.start()
    await runtime.reset()

    report = runtime.status_report()

    assert report["online"] is True
    assert report["uid"] == "user-1"
    assert report["state"] == "active"
    assert report["reset_in_progress"] is False
    assert report["consecutive_failures"] == 0
    assert report["last_health"] == {"healthy": True, "reason": None, "error": None}
    assert [entry["current"] for entry in report["recent_transitions"]] == ["active", "resetting", "active"]
    await runtime.shutdown()


def test_from_config_requires_provider_credentials():
    provider = ProviderConfig(api_key=None, project_id="workshops-prod")
    with pytest.raises(ConfigurationError):
        SyncRuntime.from_config(ConnectionConfig(), provider)


def test_from_config_wires_firebase_adapters():
    provider = ProviderConfig(api_key="key", project_id="workshops-prod")
    config = ConnectionConfig(disable_settle_seconds=0.5)

    runtime = SyncRuntime.from_config(config, provider)

    assert isinstance(runtime.identity_provider, FirebaseIdentityProvider)
    assert isinstance(runtime.client, FirestoreRestClient)
    assert runtime.client.project_id == "workshops-prod"
    assert runtime.resetter._channel.disable_settle_seconds == 0.5
    assert runtime.health_check_runner.sentinel_path == config.sentinel_path
    assert runtime.poller is not None
    assert runtime.artifact_store is not None
