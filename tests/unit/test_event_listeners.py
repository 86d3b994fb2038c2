import asyncio

import pytest

from workshop_sync.connection_resetter import ConnectionResetter
from workshop_sync.connection_state import ConnectionState
from workshop_sync.connectivity_probe import ConnectivityProbe
from workshop_sync.credential_refresher import CredentialRefresher
from workshop_sync.event_listeners import ConnectivityEventListeners
from workshop_sync.exceptions import ConnectivityError, StorePermissionError
from workshop_sync.health_check import HealthCheckRunner
from workshop_sync.network_status import OFFLINE_EVENT, ONLINE_EVENT, NetworkStatus

SENTINEL = "system_health_checks/connection_test"


async def _yielding_sleep(delay: float) -> None:
    await asyncio.sleep(0)


def make_listeners(store, identity_provider, tracker, sleep=_yielding_sleep, online=True):
    network_status = NetworkStatus(online=online)
    resetter = ConnectionResetter(
        store,
        CredentialRefresher(identity_provider),
        HealthCheckRunner(),
        tracker=tracker,
        sleep=sleep,
    )
    listeners = ConnectivityEventListeners(
        network_status,
        store,
        resetter,
        ConnectivityProbe(network_status),
        tracker=tracker,
    )
    return network_status, resetter, listeners


def test_install_is_idempotent_and_uninstall_removes(fake_store, identity_provider, tracker):
    network_status, _, listeners = make_listeners(fake_store, identity_provider, tracker)

    assert listeners.install() is True
    assert listeners.install() is False
    assert network_status.listener_count(ONLINE_EVENT) == 1
    assert network_status.listener_count(OFFLINE_EVENT) == 1
    assert fake_store.sync_listener_count == 1

    listeners.uninstall()
    assert listeners.installed is False
    assert network_status.listener_count(ONLINE_EVENT) == 0
    assert network_status.listener_count(OFFLINE_EVENT) == 0
    assert fake_store.sync_listener_count == 0


@pytest.mark.asyncio
async def test_offline_then_online_resets_to_active(fake_store, identity_provider, tracker):
    network_status, _, listeners = make_listeners(fake_store, identity_provider, tracker)
    listeners.install()

    network_status.set_online(False)
    await listeners.wait_idle()
    assert fake_store.calls == ["disable"]

    network_status.set_online(True)
    await listeners.wait_idle()

    assert tracker.state is ConnectionState.ACTIVE
    assert [(t.previous, t.current) for t in tracker.recent_transitions()] == [
        (ConnectionState.INACTIVE, ConnectionState.RESETTING),
        (ConnectionState.RESETTING, ConnectionState.ACTIVE),
    ]
    # Reset cycle, then the probe-guarded enable
    assert fake_store.calls[1:] == ["disable", "terminate", "enable", f"get:{SENTINEL}", "enable"]


@pytest.mark.asyncio
async def test_online_events_close_together_run_one_reset(fake_store, identity_provider, tracker):
    async def slow_sleep(delay: float) -> None:
        await asyncio.sleep(0.05)

    _, _, listeners = make_listeners(fake_store, identity_provider, tracker, sleep=slow_sleep)
    listeners.install()

    listeners.on_online()
    await asyncio.sleep(0.01)
    listeners.on_online()
    await listeners.wait_idle()

    assert fake_store.calls.count("disable") == 1
    assert fake_store.calls.count(f"get:{SENTINEL}") == 1
    # The dropped request does not touch the channel
    assert fake_store.calls.count("enable") == 2
    assert tracker.state is ConnectionState.ACTIVE


@pytest.mark.asyncio
async def test_failed_reset_after_online_sets_inactive(fake_store, identity_provider, tracker):
    fake_store.read_failures[SENTINEL] = [StorePermissionError()]
    _, resetter, listeners = make_listeners(fake_store, identity_provider, tracker)
    listeners.install()

    listeners.on_online()
    await listeners.wait_idle()

    assert tracker.state is ConnectionState.INACTIVE
    assert fake_store.calls.count("enable") == 1
    assert resetter.reset_in_progress is False


@pytest.mark.asyncio
async def test_offline_disable_failure_is_contained(fake_store, identity_provider, tracker):
    async def failing_disable() -> None:
        raise ConnectivityError("already closed")

    fake_store.disable_network = failing_disable
    _, _, listeners = make_listeners(fake_store, identity_provider, tracker)
    listeners.install()

    listeners.on_offline()
    await listeners.wait_idle()

    assert tracker.state is ConnectionState.INACTIVE


@pytest.mark.asyncio
async def test_sync_event_marks_active_unless_resetting(fake_store, identity_provider, tracker):
    gate = asyncio.Event()

    async def gated_sleep(delay: float) -> None:
        await gate.wait()

    _, resetter, listeners = make_listeners(fake_store, identity_provider, tracker, sleep=gated_sleep)
    listeners.install()

    fake_store.emit_sync()
    assert tracker.state is ConnectionState.ACTIVE

    listeners.on_online()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert resetter.reset_in_progress is True
    assert tracker.state is ConnectionState.RESETTING

    fake_store.emit_sync()
    assert tracker.state is ConnectionState.RESETTING

    gate.set()
    await listeners.wait_idle()
    assert tracker.state is ConnectionState.ACTIVE


@pytest.mark.asyncio
async def test_shutdown_uninstalls_and_cancels(fake_store, identity_provider, tracker):
    gate = asyncio.Event()

    async def gated_sleep(delay: float) -> None:
        await gate.wait()

    network_status, _, listeners = make_listeners(fake_store, identity_provider, tracker, sleep=gated_sleep)
    listeners.install()
    listeners.on_online()
    await asyncio.sleep(0)

    await listeners.shutdown()

    assert listeners.installed is False
    assert network_status.listener_count(ONLINE_EVENT) == 0
