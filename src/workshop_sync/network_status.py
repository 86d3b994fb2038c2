"""
Process-wide network status with ``online``/``offline`` events.

``NetworkStatus`` holds the host's view of connectivity and dispatches
events only on real transitions. ``NetworkStatusPoller`` keeps it current by
periodically opening a TCP connection to the store's host.
"""

import asyncio as _asyncio
import logging
from typing import Callable, Dict, List, Optional

asyncio = _asyncio

logger = logging.getLogger(__name__)

ONLINE_EVENT = "online"
OFFLINE_EVENT = "offline"
_EVENTS = (ONLINE_EVENT, OFFLINE_EVENT)

NetworkListener = Callable[[], None]


class NetworkStatus:
    """Online flag plus event listeners, analogous to a browser's navigator/window pair."""

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: Dict[str, List[NetworkListener]] = {event: [] for event in _EVENTS}

    @property
    def online(self) -> bool:
        return self._online

    def add_event_listener(self, event: str, listener: NetworkListener) -> None:
        self._validate_event(event)
        self._listeners[event].append(listener)

    def remove_event_listener(self, event: str, listener: NetworkListener) -> None:
        self._validate_event(event)
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def listener_count(self, event: str) -> int:
        self._validate_event(event)
        return len(self._listeners[event])

    def set_online(self, online: bool) -> bool:
        """Record the current status; returns True when it changed and events fired."""
        if online == self._online:
            return False
        self._online = online
        event = ONLINE_EVENT if online else OFFLINE_EVENT
        logger.info("Network status changed: %s", event)
        for listener in list(self._listeners[event]):
            try:
                listener()
            except Exception:  # listeners are application code
                logger.exception("Network %s listener failed", event)
        return True

    @staticmethod
    def _validate_event(event: str) -> None:
        if event not in _EVENTS:
            raise ValueError(f"Unknown network event {event!r}; expected one of {_EVENTS}")


class NetworkStatusPoller:
    """Periodically probes a TCP endpoint and feeds the result into NetworkStatus."""

    def __init__(
        self,
        status: NetworkStatus,
        host: str,
        port: int = 443,
        *,
        interval_seconds: float = 15.0,
        timeout_seconds: float = 3.0,
    ):
        self.status = status
        self.host = host
        self.port = port
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, status: NetworkStatus, config) -> "NetworkStatusPoller":
        return cls(
            status,
            config.probe_host,
            config.probe_port,
            interval_seconds=config.probe_interval_seconds,
            timeout_seconds=config.probe_timeout_seconds,
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def probe_once(self) -> bool:
        """Open and close one connection; returns whether the host was reachable."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError) as exc:
            logger.debug("Network probe to %s:%s failed: %s", self.host, self.port, exc)
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as exc:
            logger.debug("Error closing probe connection: %s", exc)
        return True

    async def poll_once(self) -> bool:
        reachable = await self.probe_once()
        self.status.set_online(reachable)
        return reachable

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            "Network status poller started: %s:%s every %.1fs",
            self.host,
            self.port,
            self.interval_seconds,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.debug("Network status poller cancelled")
        finally:
            self._task = None


__all__ = ["NetworkStatus", "NetworkStatusPoller", "OFFLINE_EVENT", "ONLINE_EVENT"]
