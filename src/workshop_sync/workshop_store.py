"""Users and workshops, read and written through the recovery pipeline."""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional

from .document_store import DocumentSnapshot, DocumentStoreClient, document_path
from .recovery import ConnectionRecovery

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
WORKSHOPS_COLLECTION = "workshops"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_record(snapshot: DocumentSnapshot) -> Optional[Dict[str, Any]]:
    if not snapshot.exists:
        return None
    return {"id": snapshot.id, **snapshot.data}


class WorkshopStore:
    def __init__(self, client: DocumentStoreClient, recovery: ConnectionRecovery):
        self.client = client
        self.recovery = recovery

    async def _read(self, path: str) -> DocumentSnapshot:
        return await self.recovery.call(lambda: self.client.get_document(path), context=f"read {path}")

    async def _write(self, path: str, data: Dict[str, Any], *, merge: bool = True) -> None:
        await self.recovery.call(lambda: self.client.set_document(path, data, merge=merge), context=f"write {path}")

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return _as_record(await self._read(document_path(USERS_COLLECTION, user_id)))

    async def get_workshop(self, workshop_id: str) -> Optional[Dict[str, Any]]:
        return _as_record(await self._read(document_path(WORKSHOPS_COLLECTION, workshop_id)))

    async def save_workshop(self, workshop_id: str, data: Dict[str, Any]) -> None:
        """Create or update a workshop; ``createdAt`` is only set on the first write."""
        path = document_path(WORKSHOPS_COLLECTION, workshop_id)
        payload = {key: value for key, value in data.items() if key != "id"}
        payload["updatedAt"] = _utcnow()
        existing = await self._read(path)
        if not existing.exists:
            payload.setdefault("createdAt", payload["updatedAt"])
            payload.setdefault("registered", 0)
            payload.setdefault("registrations", [])
        await self._write(path, payload)

    async def delete_workshop(self, workshop_id: str) -> None:
        path = document_path(WORKSHOPS_COLLECTION, workshop_id)
        await self.recovery.call(lambda: self.client.delete_document(path), context=f"delete {path}")

    async def register_user_for_workshop(self, user_id: str, workshop_id: str) -> bool:
        """
        Add the workshop to the user and the user to the workshop.

        Returns False without writing when the user does not exist or is
        already registered.
        """
        user_path = document_path(USERS_COLLECTION, user_id)
        user = await self._read(user_path)
        if not user.exists:
            logger.warning("Cannot register unknown user %s", user_id)
            return False

        registered: List[str] = list(user.get("registeredWorkshops") or [])
        if workshop_id in registered:
            return False
        await self._write(user_path, {"registeredWorkshops": registered + [workshop_id], "updatedAt": _utcnow()})

        workshop_path = document_path(WORKSHOPS_COLLECTION, workshop_id)
        workshop = await self._read(workshop_path)
        if workshop.exists:
            registrations: List[str] = list(workshop.get("registrations") or [])
            if user_id not in registrations:
                await self._write(
                    workshop_path,
                    {
                        "registered": int(workshop.get("registered") or 0) + 1,
                        "registrations": registrations + [user_id],
                        "updatedAt": _utcnow(),
                    },
                )
        logger.info("Registered user %s for workshop %s", user_id, workshop_id)
        return True

    async def unregister_user_from_workshop(self, user_id: str, workshop_id: str) -> bool:
        user_path = document_path(USERS_COLLECTION, user_id)
        user = await self._read(user_path)
        if not user.exists:
            return False

        registered: List[str] = list(user.get("registeredWorkshops") or [])
        if workshop_id not in registered:
            return False
        await self._write(
            user_path,
            {"registeredWorkshops": [item for item in registered if item != workshop_id], "updatedAt": _utcnow()},
        )

        workshop_path = document_path(WORKSHOPS_COLLECTION, workshop_id)
        workshop = await self._read(workshop_path)
        if workshop.exists:
            update: Dict[str, Any] = {"updatedAt": _utcnow()}
            current = int(workshop.get("registered") or 0)
            if current > 0:
                update["registered"] = current - 1
            registrations: List[str] = list(workshop.get("registrations") or [])
            if user_id in registrations:
                update["registrations"] = [item for item in registrations if item != user_id]
            await self._write(workshop_path, update)
        logger.info("Unregistered user %s from workshop %s", user_id, workshop_id)
        return True


__all__ = ["USERS_COLLECTION", "WORKSHOPS_COLLECTION", "WorkshopStore"]
