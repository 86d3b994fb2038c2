"""Helpers for the Firestore REST client."""

from .error_mapper import error_details, map_http_error, offline_error
from .session_manager import FirestoreSessionManager
from .sync_notifier import SyncNotifier
from .value_codec import decode_fields, decode_value, encode_fields, encode_value

__all__ = [
    "FirestoreSessionManager",
    "SyncNotifier",
    "decode_fields",
    "decode_value",
    "encode_fields",
    "encode_value",
    "error_details",
    "map_http_error",
    "offline_error",
]
