"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional

import pytest

from workshop_sync.config import runtime
from workshop_sync.connection_state_tracker import ConnectionStateTracker, reset_connection_state_tracker
from workshop_sync.document_store import DocumentSnapshot


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._data: dict[str, Any] = {}
        self.closed = False

    async def set(self, key: str, value: str | bytes) -> bool:
        """Set a string value."""
        self._data[key] = value if isinstance(value, str) else value.decode()
        return True

    async def get(self, key: str) -> str | None:
        """Get a string value."""
        return self._data.get(key)

    async def delete(self, *keys: str) -> int:
        """Delete keys."""
        deleted = 0
        for k in keys:
            if k in self._data:
                del self._data[k]
                deleted += 1
        return deleted

    async def exists(self, *keys: str) -> int:
        """Check if keys exist."""
        return sum(1 for k in keys if k in self._data)

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        """Scan keys."""
        keys = list(self._data.keys())
        if match:
            regex = "^" + ".*".join(re.escape(part) for part in match.split("*")) + "$"
            keys = [k for k in keys if re.match(regex, k)]

        for key in keys:
            yield key

    async def aclose(self) -> None:
        self.closed = True

    def dump_string(self, key: str) -> str | None:
        """Dump contents of a string (test helper)."""
        return self._data.get(key)


class FakeCredentialHolder:
    """Credential holder returning scripted tokens."""

    def __init__(self, uid: str = "user-1", tokens: Optional[List[Any]] = None):
        self.uid = uid
        self.tokens = list(tokens) if tokens is not None else []
        self.calls: List[bool] = []

    async def get_token(self, force_refresh: bool = False) -> str:
        self.calls.append(force_refresh)
        if not self.tokens:
            return "t" * 64
        token = self.tokens.pop(0)
        if isinstance(token, BaseException):
            raise token
        return token


class FakeIdentityProvider:
    def __init__(self, holder: Optional[FakeCredentialHolder] = None):
        self.holder = holder
        self.sign_out_calls = 0

    def get_current_credential_holder(self) -> Optional[FakeCredentialHolder]:
        return self.holder

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.holder = None


class FakeDocumentStore:
    """In-memory document store client recording channel operations."""

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.network_enabled = True
        # path -> list of exceptions raised by successive reads
        self.read_failures: Dict[str, List[BaseException]] = {}
        self.enable_failures: List[BaseException] = []
        self._sync_listeners: List[Callable[[], None]] = []

    async def disable_network(self) -> None:
        self.calls.append("disable")
        self.network_enabled = False

    async def enable_network(self) -> None:
        self.calls.append("enable")
        if self.enable_failures:
            raise self.enable_failures.pop(0)
        self.network_enabled = True

    async def terminate(self) -> None:
        self.calls.append("terminate")
        self.network_enabled = False

    async def get_document(self, path: str) -> DocumentSnapshot:
        self.calls.append(f"get:{path}")
        failures = self.read_failures.get(path)
        if failures:
            raise failures.pop(0)
        if path in self.documents:
            return DocumentSnapshot(path=path, exists=True, data=dict(self.documents[path]))
        return DocumentSnapshot(path=path, exists=False)

    async def set_document(self, path: str, data: Dict[str, Any], *, merge: bool = False) -> None:
        self.calls.append(f"set:{path}")
        if merge and path in self.documents:
            self.documents[path].update(data)
        else:
            self.documents[path] = dict(data)

    async def delete_document(self, path: str) -> None:
        self.calls.append(f"delete:{path}")
        self.documents.pop(path, None)

    def on_sync_state_change(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._sync_listeners.append(listener)
        return lambda: self._sync_listeners.remove(listener)

    def emit_sync(self) -> None:
        for listener in list(self._sync_listeners):
            listener()

    @property
    def sync_listener_count(self) -> int:
        return len(self._sync_listeners)


@pytest.fixture(autouse=True)
def isolated_runtime_defaults():
    """Keep developer .env files out of configuration lookups."""
    runtime._DEFAULT_VALUES = {}
    yield
    runtime._DEFAULT_VALUES = None


@pytest.fixture(autouse=True)
def clean_connection_state_tracker():
    reset_connection_state_tracker()
    yield
    reset_connection_state_tracker()


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide a fake Redis instance."""
    return FakeRedis()


@pytest.fixture
def tracker() -> ConnectionStateTracker:
    tracker = ConnectionStateTracker()
    tracker.initialize()
    return tracker


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def credential_holder() -> FakeCredentialHolder:
    return FakeCredentialHolder()


@pytest.fixture
def identity_provider(credential_holder) -> FakeIdentityProvider:
    return FakeIdentityProvider(credential_holder)


@pytest.fixture
def recorded_sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps):
    async def _sleep(delay: float) -> None:
        recorded_sleeps.append(delay)

    return _sleep
