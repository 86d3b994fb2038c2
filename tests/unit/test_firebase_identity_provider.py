"""Tests for the Firebase identity adapter."""

import aiohttp
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from workshop_sync import firebase_identity_provider as provider_module
from workshop_sync.artifact_store import RedisArtifactStore
from workshop_sync.exceptions import AuthError
from workshop_sync.firebase_identity_helpers import SECURE_TOKEN_URL, SIGN_IN_WITH_PASSWORD_URL, session_storage_key
from workshop_sync.firebase_identity_provider import FirebaseIdentityProvider

ID_TOKEN = "i" * 120
NEW_ID_TOKEN = "n" * 120


class DummyResponse:
    def __init__(self, status, payload):
        self.status = status
        self.payload = payload

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class DummySession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def post(self, url, params=None, data=None, json=None):
        self.requests.append({"url": url, "params": params, "data": data, "json": json})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True


class UnreachableRedis:
    """Redis client whose every command fails."""

    async def set(self, key, value):
        raise RedisConnectionError("Connection refused")

    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("Connection refused")


def sign_in_response():
    return DummyResponse(
        200,
        {"localId": "user-1", "idToken": ID_TOKEN, "refreshToken": "refresh-1", "expiresIn": "3600", "email": "a@b.c"},
    )


def refresh_response(id_token=NEW_ID_TOKEN, refresh_token="refresh-2"):
    return DummyResponse(200, {"id_token": id_token, "refresh_token": refresh_token, "expires_in": "3600"})


@pytest.fixture
def clock(monkeypatch):
    now = {"value": 1_000.0}
    monkeypatch.setattr(provider_module.time, "time", lambda: now["value"])
    return now


@pytest.mark.asyncio
async def test_sign_in_persists_session(fake_redis, clock):
    session = DummySession(sign_in_response())
    provider = FirebaseIdentityProvider("api-key", artifact_store=RedisArtifactStore(fake_redis), session=session)

    user = await provider.sign_in_with_email("a@b.c", "secret")

    assert user.uid == "user-1"
    assert user.email == "a@b.c"
    assert session.requests[0]["url"] == SIGN_IN_WITH_PASSWORD_URL
    assert session.requests[0]["params"] == {"key": "api-key"}
    assert session.requests[0]["json"]["returnSecureToken"] is True
    stored = await RedisArtifactStore(fake_redis).get_json(session_storage_key("api-key"))
    assert stored["uid"] == "user-1"
    assert stored["expires_at"] == 4_600.0
    assert provider.get_current_credential_holder().uid == "user-1"


@pytest.mark.asyncio
async def test_cached_token_returned_until_close_to_expiry(clock):
    session = DummySession(sign_in_response(), refresh_response())
    provider = FirebaseIdentityProvider("api-key", session=session)
    user = await provider.sign_in_with_email("a@b.c", "secret")

    assert await user.get_token() == ID_TOKEN
    assert len(session.requests) == 1

    clock["value"] = 4_400.0
    assert await user.get_token() == NEW_ID_TOKEN
    assert session.requests[1]["url"] == SECURE_TOKEN_URL
    assert session.requests[1]["data"] == {"grant_type": "refresh_token", "refresh_token": "refresh-1"}


@pytest.mark.asyncio
async def test_forced_refresh_rotates_refresh_token(fake_redis, clock):
    session = DummySession(sign_in_response(), refresh_response(), refresh_response(refresh_token="refresh-3"))
    store = RedisArtifactStore(fake_redis)
    provider = FirebaseIdentityProvider("api-key", artifact_store=store, session=session)
    user = await provider.sign_in_with_email("a@b.c", "secret")

    await user.get_token(force_refresh=True)
    await user.get_token(force_refresh=True)

    assert session.requests[2]["data"]["refresh_token"] == "refresh-2"
    assert (await store.get_json(session_storage_key("api-key")))["refresh_token"] == "refresh-3"


@pytest.mark.asyncio
async def test_provider_rejection_maps_to_auth_code(clock):
    session = DummySession(
        sign_in_response(),
        DummyResponse(400, {"error": {"code": 400, "message": "USER_DISABLED : The user account has been disabled."}}),
    )
    provider = FirebaseIdentityProvider("api-key", session=session)
    user = await provider.sign_in_with_email("a@b.c", "secret")

    with pytest.raises(AuthError) as exc_info:
        await user.get_token(force_refresh=True)

    assert exc_info.value.code == "user-disabled"
    assert exc_info.value.is_terminal is True


@pytest.mark.asyncio
async def test_unreachable_provider_raises_connection_error(clock):
    session = DummySession(sign_in_response(), aiohttp.ClientConnectionError("dns failure"))
    provider = FirebaseIdentityProvider("api-key", session=session)
    user = await provider.sign_in_with_email("a@b.c", "secret")

    with pytest.raises(ConnectionError, match="Identity provider unreachable"):
        await user.get_token(force_refresh=True)


@pytest.mark.asyncio
async def test_restore_and_sign_out(fake_redis, clock):
    store = RedisArtifactStore(fake_redis)
    await store.set_json(
        session_storage_key("api-key"),
        {"uid": "user-9", "refresh_token": "r", "id_token": ID_TOKEN, "expires_at": 9_999.0},
    )
    provider = FirebaseIdentityProvider("api-key", artifact_store=store, session=DummySession())

    user = await provider.restore_session()
    assert user.uid == "user-9"
    assert await user.get_token() == ID_TOKEN

    await provider.sign_out()
    assert provider.get_current_credential_holder() is None
    assert await store.get_json(session_storage_key("api-key")) is None
    with pytest.raises(AuthError) as exc_info:
        await user.get_token()
    assert exc_info.value.code == "no-current-user"


@pytest.mark.asyncio
async def test_restore_ignores_malformed_record(fake_redis):
    store = RedisArtifactStore(fake_redis)
    await store.set_json(session_storage_key("api-key"), {"uid": ""})
    provider = FirebaseIdentityProvider("api-key", artifact_store=store)

    assert await provider.restore_session() is None
    assert provider.get_current_credential_holder() is None


@pytest.mark.asyncio
async def test_close_leaves_injected_session_open():
    session = DummySession()
    provider = FirebaseIdentityProvider("api-key", session=session)

    await provider.close()

    assert session.closed is False


def test_api_key_required():
    with pytest.raises(ValueError):
        FirebaseIdentityProvider("")


@pytest.mark.asyncio
async def test_refresh_succeeds_when_session_cannot_be_persisted(clock):
    session = DummySession(sign_in_response(), refresh_response())
    provider = FirebaseIdentityProvider("api-key", artifact_store=RedisArtifactStore(UnreachableRedis()), session=session)
    user = await provider.sign_in_with_email("a@b.c", "secret")

    assert await user.get_token(force_refresh=True) == NEW_ID_TOKEN
    assert provider.get_current_credential_holder().uid == "user-1"


@pytest.mark.asyncio
async def test_sign_out_clears_user_when_redis_is_down(clock):
    provider = FirebaseIdentityProvider(
        "api-key", artifact_store=RedisArtifactStore(UnreachableRedis()), session=DummySession(sign_in_response())
    )
    await provider.sign_in_with_email("a@b.c", "secret")

    await provider.sign_out()

    assert provider.get_current_credential_holder() is None


@pytest.mark.asyncio
async def test_restore_returns_none_when_redis_is_down():
    provider = FirebaseIdentityProvider("api-key", artifact_store=RedisArtifactStore(UnreachableRedis()))

    assert await provider.restore_session() is None
