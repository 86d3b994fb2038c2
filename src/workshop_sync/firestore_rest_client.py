"""
Firestore adapter over the REST API.

The aiohttp session is the network channel: ``disable_network`` closes it and
makes every call fail fast as offline, ``enable_network`` opens a fresh one,
and ``terminate`` force-closes the pooled connections so no keep-alive socket
from before a reset is reused.
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp
import orjson

from .document_store import DocumentSnapshot, SyncListener
from .exceptions import ConnectivityError
from .firestore_rest_helpers import (
    FirestoreSessionManager,
    SyncNotifier,
    decode_fields,
    encode_fields,
    map_http_error,
    offline_error,
)

logger = logging.getLogger(__name__)

FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"

TokenProvider = Callable[[], Awaitable[Optional[str]]]

_SIMPLE_FIELD_PATH = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def _field_path(key: str) -> str:
    if _SIMPLE_FIELD_PATH.match(key):
        return key
    escaped = key.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


class FirestoreRestClient:
    """DocumentStoreClient implementation backed by the Firestore REST API."""

    def __init__(
        self,
        project_id: str,
        *,
        database_id: str = "(default)",
        token_provider: Optional[TokenProvider] = None,
        request_timeout_seconds: float = 15.0,
        connection_timeout_seconds: float = 10.0,
        base_url: str = FIRESTORE_BASE_URL,
    ):
        if not project_id:
            raise ValueError("project_id is required")
        self.project_id = project_id
        self.database_id = database_id
        self.token_provider = token_provider
        self.base_url = base_url.rstrip("/")
        self._session_manager = FirestoreSessionManager("firestore", connection_timeout_seconds, request_timeout_seconds)
        self._sync_notifier = SyncNotifier()
        self._network_enabled = True

    @classmethod
    def from_config(cls, provider_config, config, token_provider: Optional[TokenProvider] = None) -> "FirestoreRestClient":
        return cls(
            provider_config.project_id,
            database_id=provider_config.database_id,
            token_provider=token_provider,
            request_timeout_seconds=config.request_timeout_seconds,
        )

    @property
    def network_enabled(self) -> bool:
        return self._network_enabled

    @property
    def documents_root(self) -> str:
        return f"{self.base_url}/projects/{self.project_id}/databases/{self.database_id}/documents"

    async def enable_network(self) -> None:
        if self._network_enabled and self._session_manager.get_session() is not None:
            return
        await self._session_manager.create_session()
        self._network_enabled = True
        logger.info("Firestore network enabled")

    async def disable_network(self) -> None:
        self._network_enabled = False
        await self._session_manager.close_session()
        logger.info("Firestore network disabled")

    async def terminate(self) -> None:
        """Drop the channel and every pooled connection; ``enable_network`` starts over."""
        self._network_enabled = False
        await self._session_manager.close_session(force_connector=True)
        logger.info("Firestore client terminated")

    async def close(self) -> None:
        await self.terminate()

    def on_sync_state_change(self, listener: SyncListener) -> Callable[[], None]:
        return self._sync_notifier.add(listener)

    async def get_document(self, path: str) -> DocumentSnapshot:
        status, payload = await self._request("GET", path, operation="get", allow_missing=True)
        if status == 404:
            return DocumentSnapshot(path=path, exists=False)
        return DocumentSnapshot(
            path=path,
            exists=True,
            data=decode_fields(payload.get("fields", {})),
            update_time=payload.get("updateTime"),
        )

    async def set_document(self, path: str, data: Dict[str, Any], *, merge: bool = False) -> None:
        """Write ``data``; with ``merge`` only the given top-level fields are replaced."""
        params: List[Tuple[str, str]] = []
        if merge:
            params = [("updateMask.fieldPaths", _field_path(key)) for key in data]
        await self._request("PATCH", path, operation="set", params=params, body={"fields": encode_fields(data)})

    async def delete_document(self, path: str) -> None:
        await self._request("DELETE", path, operation="delete")

    def _document_url(self, path: str) -> str:
        return f"{self.documents_root}/{quote(path.strip('/'), safe='/')}"

    async def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token_provider is not None:
            token = await self.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _channel(self, operation: str, path: str) -> aiohttp.ClientSession:
        if not self._network_enabled:
            raise offline_error(operation, path)
        session = self._session_manager.get_session()
        if session is None:
            session = await self._session_manager.create_session()
        return session

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: Optional[List[Tuple[str, str]]] = None,
        body: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Tuple[int, Dict[str, Any]]:
        session = await self._channel(operation, path)
        headers = await self._headers()
        data = orjson.dumps(body) if body is not None else None

        try:
            async with session.request(
                method, self._document_url(path), params=params or None, data=data, headers=headers
            ) as response:
                payload = self._decode_payload(await response.read())
                status = response.status
        except asyncio.TimeoutError as exc:
            raise ConnectivityError(
                f"Failed to {operation} document {path}: request timed out", code="deadline-exceeded", path=path
            ) from exc
        except aiohttp.ClientError as exc:
            raise ConnectivityError(f"Failed to {operation} document {path}: {exc}", path=path) from exc
        except RuntimeError as exc:
            # aiohttp raises this when the session was closed by a concurrent terminate
            raise ConnectivityError(f"Failed to {operation} document {path}: {exc}", path=path) from exc

        if status == 404 and allow_missing:
            self._sync_notifier.notify()
            return status, {}
        if status >= 400:
            error = map_http_error(status, payload, operation=operation, path=path)
            logger.debug("Firestore %s %s failed: %s", method, path, error)
            raise error

        self._sync_notifier.notify()
        return status, payload

    @staticmethod
    def _decode_payload(raw: bytes) -> Dict[str, Any]:
        if not raw:
            return {}
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError:
            return {}
        if isinstance(payload, list):
            # Some error responses arrive as a one-element list of error bodies
            return {"error": payload}
        return payload if isinstance(payload, dict) else {}


__all__ = ["FIRESTORE_BASE_URL", "FirestoreRestClient", "TokenProvider"]
