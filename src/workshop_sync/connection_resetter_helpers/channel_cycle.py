"""Take the store's network channel down and bring it back up."""

import logging
from typing import Awaitable, Callable

from ..document_store import DocumentStoreClient
from .step_errors import RESET_STEP_ERRORS

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ChannelCycler:
    """Disable, optionally terminate, settle, then enable with one retry."""

    def __init__(
        self,
        client: DocumentStoreClient,
        sleep: Sleep,
        *,
        terminate_client: bool = True,
        disable_settle_seconds: float = 3.0,
        enable_settle_seconds: float = 1.0,
        enable_retry_delay_seconds: float = 2.0,
    ):
        self.client = client
        self.sleep = sleep
        self.terminate_client = terminate_client
        self.disable_settle_seconds = disable_settle_seconds
        self.enable_settle_seconds = enable_settle_seconds
        self.enable_retry_delay_seconds = enable_retry_delay_seconds

    async def take_down(self) -> None:
        try:
            await self.client.disable_network()
            logger.debug("Network disabled")
        except RESET_STEP_ERRORS as exc:
            logger.warning("Error disabling network: %s", exc)

        if self.terminate_client:
            try:
                await self.client.terminate()
                logger.debug("Client transport terminated")
            except RESET_STEP_ERRORS as exc:
                logger.warning("Error terminating client transport: %s", exc)

        await self.sleep(self.disable_settle_seconds)

    async def bring_up(self) -> bool:
        """Returns whether the channel was enabled."""
        enabled = await self._enable()
        if not enabled:
            await self.sleep(self.enable_retry_delay_seconds)
            enabled = await self._enable()
            if not enabled:
                logger.error("Network could not be re-enabled")

        await self.sleep(self.enable_settle_seconds)
        return enabled

    async def _enable(self) -> bool:
        try:
            await self.client.enable_network()
        except RESET_STEP_ERRORS as exc:
            logger.warning("Error enabling network: %s", exc)
            return False
        logger.debug("Network enabled")
        return True


__all__ = ["ChannelCycler", "Sleep"]
