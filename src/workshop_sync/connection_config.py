"""
Configuration for connection recovery against the hosted document store.

All timeout and delay values are in seconds. Each field defaults from an
environment variable (falling back to ``.env`` / ``config/runtime_env.json``
and then to a built-in default) so deployments can tune the reset timings
for a different backend without code changes.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import Tuple

from .config import ConfigurationError
from .connectionconfig_helpers import (
    optional_env_str,
    require_env_bool,
    require_env_int,
    require_env_list,
    require_env_seconds,
    require_env_str,
)


@dataclass
class ConnectionConfig:
    """
    Centralized configuration for credential refresh, reset and retry behaviour.

    Attributes:
        token_refresh_timeout_seconds: Deadline for a single credential refresh
        min_token_length: Tokens shorter than this are treated as corrupt
        disable_settle_seconds: Wait after disabling the channel so in-flight connections close
        enable_settle_seconds: Wait after re-enabling the channel
        enable_retry_delay_seconds: Wait before the second enable attempt when the first fails
        terminate_client_on_reset: Terminate the underlying transport while the channel is down
        retry_max_attempts: Default attempt budget for retried store calls
        retry_base_delay_seconds: Backoff base; delay after attempt i is base * 2**i
        retry_max_delay_seconds: Backoff ceiling
        request_timeout_seconds: Total timeout for a single HTTP request
        sentinel_collection: Collection holding the health-check document
        sentinel_document: Document id read by the health check
        fallback_to_user_document: Also try ``users/{uid}`` when the sentinel read fails
        artifact_key_substrings: Local cache keys containing any of these are provider artifacts
        probe_host: Host used by the network status poller
        probe_port: Port used by the network status poller
        probe_interval_seconds: Interval between network probes
        probe_timeout_seconds: Timeout for a single network probe
        transition_history_size: Number of state transitions retained for diagnostics
    """

    token_refresh_timeout_seconds: float = field(
        default_factory=partial(require_env_seconds, "SYNC_TOKEN_REFRESH_TIMEOUT_SECONDS")
    )
    min_token_length: int = field(default_factory=partial(require_env_int, "SYNC_MIN_TOKEN_LENGTH"))

    # Reset timings, tuned against Firestore's observed behaviour
    disable_settle_seconds: float = field(default_factory=partial(require_env_seconds, "SYNC_DISABLE_SETTLE_SECONDS"))
    enable_settle_seconds: float = field(default_factory=partial(require_env_seconds, "SYNC_ENABLE_SETTLE_SECONDS"))
    enable_retry_delay_seconds: float = field(
        default_factory=partial(require_env_seconds, "SYNC_ENABLE_RETRY_DELAY_SECONDS")
    )
    terminate_client_on_reset: bool = field(
        default_factory=partial(require_env_bool, "SYNC_TERMINATE_CLIENT_ON_RESET")
    )

    # Retry wrapper
    retry_max_attempts: int = field(default_factory=partial(require_env_int, "SYNC_RETRY_MAX_ATTEMPTS"))
    retry_base_delay_seconds: float = field(
        default_factory=partial(require_env_seconds, "SYNC_RETRY_BASE_DELAY_SECONDS")
    )
    retry_max_delay_seconds: float = field(
        default_factory=partial(require_env_seconds, "SYNC_RETRY_MAX_DELAY_SECONDS")
    )
    request_timeout_seconds: float = field(default_factory=partial(require_env_seconds, "SYNC_REQUEST_TIMEOUT_SECONDS"))

    # Health check
    sentinel_collection: str = field(default_factory=partial(require_env_str, "SYNC_SENTINEL_COLLECTION"))
    sentinel_document: str = field(default_factory=partial(require_env_str, "SYNC_SENTINEL_DOCUMENT"))
    fallback_to_user_document: bool = field(
        default_factory=partial(require_env_bool, "SYNC_FALLBACK_TO_USER_DOCUMENT")
    )

    artifact_key_substrings: Tuple[str, ...] = field(
        default_factory=partial(require_env_list, "SYNC_ARTIFACT_KEY_SUBSTRINGS")
    )

    # Network status poller
    probe_host: str = field(default_factory=partial(require_env_str, "SYNC_PROBE_HOST"))
    probe_port: int = field(default_factory=partial(require_env_int, "SYNC_PROBE_PORT"))
    probe_interval_seconds: float = field(default_factory=partial(require_env_seconds, "SYNC_PROBE_INTERVAL_SECONDS"))
    probe_timeout_seconds: float = field(default_factory=partial(require_env_seconds, "SYNC_PROBE_TIMEOUT_SECONDS"))

    transition_history_size: int = field(default_factory=partial(require_env_int, "SYNC_TRANSITION_HISTORY_SIZE"))

    def __post_init__(self) -> None:
        if self.retry_max_delay_seconds < self.retry_base_delay_seconds:
            raise ConfigurationError.invalid_value(
                "retry_max_delay_seconds",
                self.retry_max_delay_seconds,
                "Must not be smaller than retry_base_delay_seconds",
            )
        if self.min_token_length < 1:
            raise ConfigurationError.invalid_value("min_token_length", self.min_token_length, "Must be at least 1")

    @property
    def sentinel_path(self) -> str:
        return f"{self.sentinel_collection}/{self.sentinel_document}"


@dataclass
class ProviderConfig:
    """Identity provider and document store endpoints for a Firebase project."""

    api_key: str | None = field(default_factory=partial(optional_env_str, "FIREBASE_API_KEY"))
    project_id: str | None = field(default_factory=partial(optional_env_str, "FIREBASE_PROJECT_ID"))
    database_id: str = field(default_factory=partial(require_env_str, "FIREBASE_DATABASE_ID"))
    redis_url: str = field(default_factory=partial(require_env_str, "SYNC_REDIS_URL"))

    def require_credentials(self) -> None:
        """Raise when the project cannot be reached without further settings."""
        if not self.api_key:
            raise ConfigurationError.missing_value("FIREBASE_API_KEY")
        if not self.project_id:
            raise ConfigurationError.missing_value("FIREBASE_PROJECT_ID")


def get_connection_config() -> ConnectionConfig:
    """Build a ConnectionConfig from the current environment."""
    return ConnectionConfig()


def get_provider_config() -> ProviderConfig:
    """Build a ProviderConfig from the current environment."""
    return ProviderConfig()


__all__ = ["ConnectionConfig", "ProviderConfig", "get_connection_config", "get_provider_config"]
