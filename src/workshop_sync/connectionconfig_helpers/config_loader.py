"""Environment lookups with built-in defaults for ConnectionConfig fields."""

from typing import Tuple

from ..config import ConfigurationError, env_bool, env_int, env_list, env_seconds, env_str

_DEFAULT_SECONDS_VALUES = {
    "SYNC_TOKEN_REFRESH_TIMEOUT_SECONDS": 10.0,
    "SYNC_DISABLE_SETTLE_SECONDS": 3.0,
    "SYNC_ENABLE_SETTLE_SECONDS": 1.0,
    "SYNC_ENABLE_RETRY_DELAY_SECONDS": 2.0,
    "SYNC_RETRY_BASE_DELAY_SECONDS": 1.0,
    "SYNC_RETRY_MAX_DELAY_SECONDS": 10.0,
    "SYNC_REQUEST_TIMEOUT_SECONDS": 15.0,
    "SYNC_PROBE_INTERVAL_SECONDS": 15.0,
    "SYNC_PROBE_TIMEOUT_SECONDS": 3.0,
}

_DEFAULT_INT_VALUES = {
    "SYNC_MIN_TOKEN_LENGTH": 50,
    "SYNC_RETRY_MAX_ATTEMPTS": 3,
    "SYNC_PROBE_PORT": 443,
    "SYNC_TRANSITION_HISTORY_SIZE": 50,
}

_DEFAULT_BOOL_VALUES = {
    "SYNC_TERMINATE_CLIENT_ON_RESET": True,
    "SYNC_FALLBACK_TO_USER_DOCUMENT": True,
}

_DEFAULT_STR_VALUES = {
    "SYNC_SENTINEL_COLLECTION": "system_health_checks",
    "SYNC_SENTINEL_DOCUMENT": "connection_test",
    "SYNC_PROBE_HOST": "firestore.googleapis.com",
    "FIREBASE_DATABASE_ID": "(default)",
    "SYNC_REDIS_URL": "redis://localhost:6379/0",
}

_DEFAULT_LIST_VALUES = {
    "SYNC_ARTIFACT_KEY_SUBSTRINGS": ("firebase", "firestore"),
}


def _missing(name: str) -> ConfigurationError:
    return ConfigurationError(f"Environment variable {name} must be defined")


def require_env_seconds(name: str) -> float:
    """Get a non-negative duration, using the built-in default if available."""
    value = env_seconds(name)
    if value is not None:
        return value
    if name in _DEFAULT_SECONDS_VALUES:
        return _DEFAULT_SECONDS_VALUES[name]
    raise _missing(name)


def require_env_int(name: str) -> int:
    """Get a positive integer, using the built-in default if available."""
    value = env_int(name)
    if value is None:
        if name not in _DEFAULT_INT_VALUES:
            raise _missing(name)
        return _DEFAULT_INT_VALUES[name]
    if value < 1:
        raise ConfigurationError.invalid_value(name, value, "Must be at least 1")
    return value


def require_env_bool(name: str) -> bool:
    value = env_bool(name)
    if value is not None:
        return value
    if name in _DEFAULT_BOOL_VALUES:
        return _DEFAULT_BOOL_VALUES[name]
    raise _missing(name)


def require_env_str(name: str) -> str:
    value = env_str(name)
    if value is not None:
        return value
    if name in _DEFAULT_STR_VALUES:
        return _DEFAULT_STR_VALUES[name]
    raise _missing(name)


def optional_env_str(name: str) -> str | None:
    """Provider settings have no default; absence is resolved by the caller."""
    return env_str(name)


def require_env_list(name: str) -> Tuple[str, ...]:
    value = env_list(name)
    if value:
        return value
    if name in _DEFAULT_LIST_VALUES:
        return _DEFAULT_LIST_VALUES[name]
    raise _missing(name)
