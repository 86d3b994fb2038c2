"""
Environment-backed configuration lookups.

A variable set in the process environment wins. Otherwise the first value
found in the ``.env`` files, then the JSON defaults files, is used. Blank
values count as unset.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")
_JSON_ENV_CANDIDATES = (Path("config/runtime_env.json"), Path.home() / ".workshop_sync_env.json")

# Lazily filled from the files above; tests assign a dict directly
_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    from .runtime_helpers import DotenvLoader, JsonConfigLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    defaults: dict[str, str] = {}
    sources = [DotenvLoader.load_from_file(path) for path in _DOTENV_CANDIDATES]
    sources += [JsonConfigLoader.load_from_file(path) for path in _JSON_ENV_CANDIDATES]
    for source in sources:
        for key, value in source.items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def _parse(name: str, raw_value: str, *, cast: Callable[[str], T], kind: str) -> T:
    try:
        return cast(raw_value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Environment variable {name!r} must be {kind} (got {raw_value!r})") from exc


def env_str(name: str, or_value: Optional[str] = None) -> Optional[str]:
    """Stripped value of ``name``, or ``or_value`` when it is unset everywhere."""
    for candidate in (os.getenv(name), _load_default_values().get(name)):
        if candidate is not None and candidate.strip():
            return candidate.strip()
    return or_value


def env_int(name: str, or_value: Optional[int] = None) -> Optional[int]:
    raw = env_str(name)
    if raw is None:
        return or_value
    return _parse(name, raw, cast=int, kind="an integer")


def env_seconds(name: str, or_value: Optional[float] = None) -> Optional[float]:
    """Non-negative duration in (possibly fractional) seconds."""
    raw = env_str(name)
    if raw is None:
        return or_value
    value = _parse(name, raw, cast=float, kind="a number of seconds")
    if value < 0:
        raise ConfigurationError(f"Environment variable {name!r} must be non-negative (got {value})")
    return value


def env_bool(name: str, or_value: Optional[bool] = None) -> Optional[bool]:
    raw = env_str(name)
    if raw is None:
        return or_value
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Environment variable {name!r} must be a boolean (got {raw!r})")


def env_list(name: str, or_value: Optional[tuple[str, ...]] = None, *, separator: str = ",") -> Optional[tuple[str, ...]]:
    """Comma-separated items with blanks and repeats dropped, first occurrence kept."""
    raw = env_str(name)
    if raw is None:
        return or_value
    items = (item.strip() for item in raw.split(separator))
    return tuple(dict.fromkeys(item for item in items if item))
