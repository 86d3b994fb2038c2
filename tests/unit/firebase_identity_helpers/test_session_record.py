import pytest

from workshop_sync.firebase_identity_helpers import (
    FirebaseSessionRecord,
    provider_error_code,
    session_storage_key,
)


def test_storage_key_contains_provider_prefix():
    key = session_storage_key("abc")

    assert key == "firebase:authUser:abc:[DEFAULT]"


def test_token_freshness_respects_margin():
    record = FirebaseSessionRecord(uid="u", refresh_token="r", id_token="t", expires_at=1_000.0)

    assert record.token_is_fresh(699.0) is True
    assert record.token_is_fresh(700.0) is False
    assert FirebaseSessionRecord(uid="u", refresh_token="r", expires_at=1_000.0).token_is_fresh(0.0) is False


def test_from_dict_validates_required_fields():
    record = FirebaseSessionRecord.from_dict({"uid": "u", "refresh_token": "r", "expires_at": 5, "email": ""})

    assert record == FirebaseSessionRecord(uid="u", refresh_token="r", id_token=None, expires_at=5.0, email=None)
    assert FirebaseSessionRecord.from_dict({"uid": "u"}) is None
    assert FirebaseSessionRecord.from_dict({"uid": 3, "refresh_token": "r"}) is None


@pytest.mark.parametrize(
    "message, code",
    [
        ("TOKEN_EXPIRED", "user-token-expired"),
        ("USER_DISABLED : The user account has been disabled by an administrator.", "user-disabled"),
        ("INVALID_REFRESH_TOKEN", "invalid-refresh-token"),
        ("INVALID_GRANT_TYPE", "invalid-grant-type"),
        ("PROJECT_NOT_FOUND", "project-not-found"),
    ],
)
def test_provider_error_code(message, code):
    assert provider_error_code(message) == code
