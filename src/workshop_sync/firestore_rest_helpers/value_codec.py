"""Conversion between Python values and Firestore REST typed values."""

import base64
import datetime as dt
import math
from typing import Any, Dict


def encode_value(value: Any) -> Dict[str, Any]:
    """Encode a Python value as a Firestore ``Value`` object."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        # int64 travels as a decimal string
        return {"integerValue": str(value)}
    if isinstance(value, float):
        if math.isnan(value):
            return {"doubleValue": "NaN"}
        if math.isinf(value):
            return {"doubleValue": "Infinity" if value > 0 else "-Infinity"}
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bytes):
        return {"bytesValue": base64.b64encode(value).decode("ascii")}
    if isinstance(value, dt.datetime):
        return {"timestampValue": _format_timestamp(value)}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    raise TypeError(f"Unsupported document value type: {type(value).__name__}")


def encode_fields(data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    for key in data:
        if not isinstance(key, str):
            raise TypeError(f"Document field names must be strings, got {type(key).__name__}")
    return {key: encode_value(value) for key, value in data.items()}


def decode_value(value: Dict[str, Any]) -> Any:
    """Decode a Firestore ``Value`` object."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "timestampValue" in value:
        return _parse_timestamp(value["timestampValue"])
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        point = value["geoPointValue"]
        return {"latitude": point.get("latitude", 0.0), "longitude": point.get("longitude", 0.0)}
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    raise ValueError(f"Unrecognised Firestore value: {sorted(value)}")


def decode_fields(fields: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def _format_timestamp(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    value = value.astimezone(dt.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_timestamp(raw: str) -> dt.datetime:
    # Firestore emits up to nanosecond precision; datetime keeps microseconds
    text = raw.rstrip("Z")
    if "." in text:
        head, fraction = text.split(".", 1)
        text = f"{head}.{fraction[:6].ljust(6, '0')}"
    parsed = dt.datetime.fromisoformat(text)
    return parsed.replace(tzinfo=dt.timezone.utc)


__all__ = ["decode_fields", "decode_value", "encode_fields", "encode_value"]
