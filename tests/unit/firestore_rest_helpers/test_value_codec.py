import datetime as dt
import math

import pytest

from workshop_sync.firestore_rest_helpers import decode_fields, decode_value, encode_fields, encode_value


@pytest.mark.parametrize(
    ("value", "encoded"),
    [
        (None, {"nullValue": None}),
        (True, {"booleanValue": True}),
        (42, {"integerValue": "42"}),
        (1.5, {"doubleValue": 1.5}),
        ("Pottery", {"stringValue": "Pottery"}),
        (b"\x00\x01", {"bytesValue": "AAE="}),
        ([1, "a"], {"arrayValue": {"values": [{"integerValue": "1"}, {"stringValue": "a"}]}}),
    ],
)
def test_encode_value(value, encoded):
    assert encode_value(value) == encoded


def test_booleans_are_not_encoded_as_integers():
    assert encode_value(False) == {"booleanValue": False}


def test_non_finite_doubles_are_encoded_as_strings():
    assert encode_value(float("nan")) == {"doubleValue": "NaN"}
    assert encode_value(float("-inf")) == {"doubleValue": "-Infinity"}
    assert math.isinf(decode_value({"doubleValue": "Infinity"}))


def test_naive_timestamps_are_treated_as_utc():
    encoded = encode_value(dt.datetime(2024, 3, 1, 9, 30, 0, 250000))
    assert encoded == {"timestampValue": "2024-03-01T09:30:00.250000Z"}


def test_timestamps_with_nanoseconds_are_truncated():
    decoded = decode_value({"timestampValue": "2024-03-01T09:30:00.123456789Z"})
    assert decoded == dt.datetime(2024, 3, 1, 9, 30, 0, 123456, tzinfo=dt.timezone.utc)

    whole = decode_value({"timestampValue": "2024-03-01T09:30:00Z"})
    assert whole.tzinfo == dt.timezone.utc


def test_nested_workshop_document_decodes():
    fields = {
        "title": {"stringValue": "Glazing basics"},
        "registered": {"integerValue": "3"},
        "registrations": {"arrayValue": {"values": [{"stringValue": "u1"}]}},
        "venue": {
            "mapValue": {
                "fields": {
                    "room": {"stringValue": "B2"},
                    "location": {"geoPointValue": {"latitude": 51.5, "longitude": -0.1}},
                }
            }
        },
        "host": {"referenceValue": "projects/p/databases/(default)/documents/users/u9"},
        "empty": {"arrayValue": {}},
    }

    assert decode_fields(fields) == {
        "title": "Glazing basics",
        "registered": 3,
        "registrations": ["u1"],
        "venue": {"room": "B2", "location": {"latitude": 51.5, "longitude": -0.1}},
        "host": "projects/p/databases/(default)/documents/users/u9",
        "empty": [],
    }


def test_encode_fields_rejects_unsupported_values():
    with pytest.raises(TypeError):
        encode_fields({"callback": object()})
    with pytest.raises(TypeError):
        encode_fields({1: "x"})


def test_decode_value_rejects_unknown_shapes():
    with pytest.raises(ValueError):
        decode_value({"mysteryValue": 1})
