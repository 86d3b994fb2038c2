"""One-shot escalation when verification points at corrupted local state."""

import logging
from typing import Optional

from ..artifact_store import RedisArtifactStore
from ..credential_refresher import CredentialRefresher
from .step_errors import RESET_STEP_ERRORS

logger = logging.getLogger(__name__)


class ResetEscalation:
    """Clears cached provider artifacts and forces a credential refresh."""

    def __init__(self, credential_refresher: CredentialRefresher, artifact_store: Optional[RedisArtifactStore] = None):
        self.credential_refresher = credential_refresher
        self.artifact_store = artifact_store

    async def run(self) -> None:
        await self._clear_artifacts()
        if not self.credential_refresher.has_session():
            return
        try:
            await self.credential_refresher.refresh_credential(force=True)
        except RESET_STEP_ERRORS as exc:
            logger.warning("Forced token refresh during escalation failed: %s", exc)

    async def _clear_artifacts(self) -> None:
        if self.artifact_store is None:
            logger.debug("No artifact store configured; skipping artifact clearing")
            return
        try:
            await self.artifact_store.clear_matching()
        except RESET_STEP_ERRORS as exc:
            logger.warning("Error clearing cached provider artifacts: %s", exc)


__all__ = ["ResetEscalation"]
