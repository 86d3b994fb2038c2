"""Helpers for building ConnectionConfig instances."""

from .config_loader import (
    optional_env_str,
    require_env_bool,
    require_env_int,
    require_env_list,
    require_env_seconds,
    require_env_str,
)

__all__ = [
    "optional_env_str",
    "require_env_bool",
    "require_env_int",
    "require_env_list",
    "require_env_seconds",
    "require_env_str",
]
