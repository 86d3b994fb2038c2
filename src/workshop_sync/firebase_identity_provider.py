"""Firebase Authentication adapter over the provider's REST endpoints."""

import asyncio
import logging
import time as _time
from typing import Any, Dict, Optional

import aiohttp
from redis.exceptions import RedisError

from .artifact_store import RedisArtifactStore
from .exceptions import AuthError
from .firebase_identity_helpers import (
    FirebaseSessionRecord,
    exchange_refresh_token,
    session_storage_key,
    sign_in_with_password,
)

time = _time  # Exposed for test monkeypatching of time.time

logger = logging.getLogger(__name__)


class FirebaseUser:
    """Credential holder bound to the provider that issued it."""

    def __init__(self, provider: "FirebaseIdentityProvider", record: FirebaseSessionRecord):
        self._provider = provider
        self._record = record

    @property
    def uid(self) -> str:
        return self._record.uid

    @property
    def email(self) -> Optional[str]:
        return self._record.email

    async def get_token(self, force_refresh: bool = False) -> str:
        return await self._provider.get_token_for(self._record, force_refresh=force_refresh)


class FirebaseIdentityProvider:
    """Keeps one signed-in user and reissues id tokens on demand."""

    def __init__(
        self,
        api_key: str,
        *,
        artifact_store: Optional[RedisArtifactStore] = None,
        request_timeout_seconds: float = 15.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if not api_key:
            raise ValueError("api_key is required")
        self.api_key = api_key
        self.artifact_store = artifact_store
        self.request_timeout_seconds = request_timeout_seconds
        self._session = session
        self._owns_session = session is None
        self._record: Optional[FirebaseSessionRecord] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def storage_key(self) -> str:
        return session_storage_key(self.api_key)

    def get_current_credential_holder(self) -> Optional[FirebaseUser]:
        if self._record is None:
            return None
        return FirebaseUser(self, self._record)

    async def restore_session(self) -> Optional[FirebaseUser]:
        """Load a previously persisted session from the artifact store."""
        if self.artifact_store is None:
            return None
        try:
            payload = await self.artifact_store.get_json(self.storage_key)
        except (RedisError, OSError) as exc:
            logger.warning("Could not load persisted session: %s", exc)
            return None
        if not isinstance(payload, dict):
            return None
        record = FirebaseSessionRecord.from_dict(payload)
        if record is None:
            logger.warning("Ignoring malformed persisted session record")
            return None
        self._record = record
        logger.info("Restored session for user %s", record.uid)
        return FirebaseUser(self, record)

    async def sign_in_with_email(self, email: str, password: str) -> FirebaseUser:
        payload = await sign_in_with_password(self._get_session(), self.api_key, email, password)
        record = FirebaseSessionRecord(
            uid=payload["localId"],
            refresh_token=payload["refreshToken"],
            id_token=payload["idToken"],
            expires_at=time.time() + self._parse_expires_in(payload.get("expiresIn")),
            email=payload.get("email") or email,
        )
        self._record = record
        await self._persist(record)
        logger.info("Signed in user %s", record.uid)
        return FirebaseUser(self, record)

    async def sign_out(self) -> None:
        uid = self._record.uid if self._record else None
        self._record = None
        if self.artifact_store is not None:
            try:
                await self.artifact_store.delete(self.storage_key)
            except (RedisError, OSError) as exc:
                logger.warning("Could not remove persisted session for user %s: %s", uid, exc)
        logger.info("Signed out user %s", uid)

    async def get_token_for(self, record: FirebaseSessionRecord, *, force_refresh: bool = False) -> str:
        """Return the cached id token unless forced or close to expiry."""
        if record is not self._record:
            raise AuthError("Credential holder is no longer signed in", code="no-current-user")
        if not force_refresh and record.token_is_fresh(time.time()):
            return record.id_token or ""

        async with self._refresh_lock:
            if not force_refresh and record.token_is_fresh(time.time()):
                return record.id_token or ""
            payload = await exchange_refresh_token(self._get_session(), self.api_key, record.refresh_token)
            self._apply_refresh(record, payload)
            await self._persist(record)
            logger.debug("Id token reissued for user %s", record.uid)
            return record.id_token or ""

    def _apply_refresh(self, record: FirebaseSessionRecord, payload: Dict[str, Any]) -> None:
        record.id_token = payload["id_token"]
        record.refresh_token = payload["refresh_token"]
        record.expires_at = time.time() + self._parse_expires_in(payload.get("expires_in"))

    @staticmethod
    def _parse_expires_in(raw: Any) -> float:
        try:
            return float(raw)
        except (TypeError, ValueError):
            return 3600.0

    async def _persist(self, record: FirebaseSessionRecord) -> None:
        if self.artifact_store is None:
            return
        try:
            await self.artifact_store.set_json(self.storage_key, record.to_dict())
        except (RedisError, OSError) as exc:
            # The in-memory record stays authoritative until the next successful write
            logger.warning("Could not persist session for user %s: %s", record.uid, exc)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.request_timeout_seconds))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["FirebaseIdentityProvider", "FirebaseUser"]
