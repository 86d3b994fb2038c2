"""
Contract for the hosted document store client.

Adapters implement the channel controls (``disable_network``,
``enable_network``, ``terminate``) so that whatever transport-specific steps a
provider SDK needs stay inside the adapter.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

SyncListener = Callable[[], None]


@dataclass(frozen=True)
class DocumentSnapshot:
    """Result of a single document read; ``exists`` is False for a missing document."""

    path: str
    exists: bool
    data: Dict[str, Any] = field(default_factory=dict)
    update_time: Optional[str] = None

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@runtime_checkable
class DocumentStoreClient(Protocol):
    async def disable_network(self) -> None: ...

    async def enable_network(self) -> None: ...

    async def terminate(self) -> None: ...

    async def get_document(self, path: str) -> DocumentSnapshot: ...

    async def set_document(self, path: str, data: Dict[str, Any], *, merge: bool = False) -> None: ...

    async def delete_document(self, path: str) -> None: ...

    def on_sync_state_change(self, listener: SyncListener) -> Callable[[], None]: ...


def document_path(collection: str, document_id: str) -> str:
    if not collection or not document_id:
        raise ValueError("collection and document_id must be non-empty")
    if "/" in document_id:
        raise ValueError(f"document_id must not contain '/': {document_id!r}")
    return f"{collection.strip('/')}/{document_id}"


__all__ = ["DocumentSnapshot", "DocumentStoreClient", "SyncListener", "document_path"]
