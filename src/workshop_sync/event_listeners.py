"""
Process-wide reactions to connectivity changes.

Installed once for the application lifetime: going offline takes the store's
network channel down, coming back online runs a reset, and the store's
"in sync" event marks the connection active.
"""

import logging
from typing import Callable, Optional

from .async_helpers import BackgroundTasks
from .connection_resetter import ConnectionResetter
from .connection_resetter_helpers import RESET_STEP_ERRORS
from .connection_state import ConnectionState
from .connection_state_tracker import ConnectionStateTracker, get_connection_state_tracker
from .connectivity_probe import ConnectivityProbe
from .document_store import DocumentStoreClient
from .network_status import OFFLINE_EVENT, ONLINE_EVENT, NetworkStatus

logger = logging.getLogger(__name__)


class ConnectivityEventListeners:
    def __init__(
        self,
        network_status: NetworkStatus,
        client: DocumentStoreClient,
        resetter: ConnectionResetter,
        probe: ConnectivityProbe,
        *,
        tracker: Optional[ConnectionStateTracker] = None,
    ):
        self.network_status = network_status
        self.client = client
        self.resetter = resetter
        self.probe = probe
        self.tracker = tracker if tracker is not None else get_connection_state_tracker()
        self._tasks = BackgroundTasks("connectivity_listeners")
        self._unsubscribe_sync: Optional[Callable[[], None]] = None

    @property
    def installed(self) -> bool:
        return self._unsubscribe_sync is not None

    def install(self) -> bool:
        """Register the listeners; returns False when they were already installed."""
        if self.installed:
            return False
        self.network_status.add_event_listener(ONLINE_EVENT, self.on_online)
        self.network_status.add_event_listener(OFFLINE_EVENT, self.on_offline)
        self._unsubscribe_sync = self.client.on_sync_state_change(self.on_sync)
        logger.info("Connectivity event listeners installed")
        return True

    def uninstall(self) -> None:
        if not self.installed:
            return
        self.network_status.remove_event_listener(ONLINE_EVENT, self.on_online)
        self.network_status.remove_event_listener(OFFLINE_EVENT, self.on_offline)
        self._unsubscribe_sync()
        self._unsubscribe_sync = None
        logger.info("Connectivity event listeners removed")

    def on_offline(self) -> None:
        logger.info("Network went offline; disabling document store network")
        self._tasks.spawn(self._disable_network)

    def on_online(self) -> None:
        logger.info("Network is back online; resetting connection")
        self._tasks.spawn(self._reconnect)

    def on_sync(self) -> None:
        # A reset settles the state itself once verification finishes
        if self.resetter.reset_in_progress:
            return
        self.tracker.transition(ConnectionState.ACTIVE, "store in sync")

    async def _disable_network(self) -> None:
        try:
            await self.client.disable_network()
        except RESET_STEP_ERRORS as exc:
            logger.warning("Error disabling network after going offline: %s", exc)

    async def _reconnect(self) -> None:
        try:
            result = await self.resetter.reset_connection(strict=True)
            if not result.performed:
                return
            await self.probe.try_enable_network(self.client)
        except RESET_STEP_ERRORS as exc:
            logger.error("Failed to reconnect after coming online: %s", exc)
            self.tracker.transition(ConnectionState.INACTIVE, "reconnect after online failed")

    async def wait_idle(self) -> None:
        """Wait for every scheduled reaction to finish."""
        await self._tasks.wait_idle()

    async def shutdown(self) -> None:
        self.uninstall()
        await self._tasks.cancel_all()


__all__ = ["ConnectivityEventListeners"]
