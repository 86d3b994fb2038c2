from workshop_sync.exceptions import AuthError, ConnectivityError, StoreError
from workshop_sync.firestore_rest_helpers import error_details, map_http_error, offline_error


def test_error_details_reads_status_and_message():
    payload = {"error": {"code": 400, "status": "FAILED_PRECONDITION", "message": "index required"}}
    assert error_details(payload) == ("FAILED_PRECONDITION", "index required")


def test_error_details_handles_missing_bodies():
    assert error_details(None) == (None, None)
    assert error_details({}) == (None, None)
    assert error_details({"error": []}) == (None, None)


def test_rpc_status_takes_precedence_over_http_status():
    payload = {"error": {"status": "UNAVAILABLE", "message": "backend restarting"}}
    error = map_http_error(500, payload, operation="get", path="users/u1")

    assert isinstance(error, ConnectivityError)
    assert error.code == "unavailable"
    assert str(error) == "Failed to get document users/u1: HTTP 500 backend restarting"


def test_unauthenticated_status_maps_to_auth_error():
    payload = {"error": {"status": "UNAUTHENTICATED"}}
    error = map_http_error(400, payload, operation="set", path="users/u1")
    assert isinstance(error, AuthError)
    assert error.code == "unauthenticated"


def test_unknown_status_keeps_http_context():
    error = map_http_error(418, {}, operation="delete", path="workshops/w1")
    assert type(error) is StoreError
    assert error.code == "unknown"
    assert error.status == 418
    assert error.path == "workshops/w1"


def test_offline_error_message():
    error = offline_error("get", "users/u1")
    assert str(error) == "Failed to get document because the client is offline"
    assert error.code == "unavailable"
