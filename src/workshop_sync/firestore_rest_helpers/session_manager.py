"""HTTP session management for the Firestore REST channel."""

import asyncio
import logging
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class FirestoreSessionManager:
    """Owns the aiohttp session that stands in for the store's network channel."""

    def __init__(self, service_name: str, connection_timeout: float, request_timeout: float):
        self.service_name = service_name
        self.connection_timeout = connection_timeout
        self.request_timeout = request_timeout
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    async def create_session(self) -> aiohttp.ClientSession:
        """Create the HTTP session, replacing any open one."""
        if self.session and not self.session.closed:
            await self.close_session()

        timeout = aiohttp.ClientTimeout(
            total=self.request_timeout,
            connect=self.connection_timeout,
        )
        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers={"User-Agent": f"{self.service_name}-client/1.0"},
            connector=aiohttp.TCPConnector(
                limit=30,
                ttl_dns_cache=300,
                use_dns_cache=True,
            ),
        )
        self.logger.info("HTTP session created")
        return self.session

    async def close_session(self, *, force_connector: bool = False) -> None:
        """
        Close the HTTP session.

        ``force_connector`` closes the connector first so pooled keep-alive
        sockets are dropped immediately rather than drained.
        """
        if not self.session:
            return

        try:
            if not self.session.closed:
                if force_connector:
                    connector = getattr(self.session, "connector", None)
                    if connector:
                        await connector.close()
                        self.logger.debug("Closed connector")
                await asyncio.wait_for(self.session.close(), timeout=5.0)
            else:
                self.logger.debug("HTTP session already closed")
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            self.logger.warning("Error closing HTTP session: %s", exc)
        finally:
            self.session = None
            self.logger.info("HTTP session cleanup completed")

    def get_session(self) -> Optional[aiohttp.ClientSession]:
        """Get the current session, or None when the channel is down."""
        return self.session if self.session and not self.session.closed else None


__all__ = ["FirestoreSessionManager"]
