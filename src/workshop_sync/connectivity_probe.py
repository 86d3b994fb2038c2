"""Reports network status and guards enabling the store's network channel."""

import logging

from .document_store import DocumentStoreClient
from .network_status import NetworkStatus

logger = logging.getLogger(__name__)


class ConnectivityProbe:
    def __init__(self, network_status: NetworkStatus):
        self.network_status = network_status

    def is_online(self) -> bool:
        return self.network_status.online

    async def try_enable_network(self, client: DocumentStoreClient) -> bool:
        """Enable the channel only when online; returns whether enable was attempted."""
        if not self.is_online():
            logger.info("Network is offline; not enabling document store network")
            return False
        await client.enable_network()
        logger.debug("Document store network enabled")
        return True


__all__ = ["ConnectivityProbe"]
