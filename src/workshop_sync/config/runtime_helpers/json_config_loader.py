"""JSON configuration file loading utilities."""

from pathlib import Path
from typing import Any, Dict

import orjson

from ..errors import ConfigurationError


class JsonConfigLoader:
    """Loads flat ``NAME -> value`` maps from JSON files for environment fallbacks."""

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Load configuration from a JSON file and stringify its scalar values.

        Raises:
            ConfigurationError: If the file cannot be read or does not hold a flat object
        """
        if not path.exists():
            return {}

        try:
            payload = orjson.loads(path.read_bytes())
        except OSError as exc:
            raise ConfigurationError(f"Failed to read {path}") from exc
        except orjson.JSONDecodeError as exc:
            raise ConfigurationError(f"Failed to parse JSON config {path}") from exc

        if not isinstance(payload, dict):
            raise ConfigurationError(f"JSON config {path} must contain an object at the top level")

        return JsonConfigLoader._normalize_values(payload, path)

    @staticmethod
    def _normalize_values(payload: Dict[str, Any], path: Path) -> Dict[str, str]:
        normalized: Dict[str, str] = {}

        for key, value in payload.items():
            if isinstance(value, (dict, list)):
                raise ConfigurationError(f"JSON config {path} must map environment names to scalar values (problematic key: {key})")

            if value is None:
                continue
            if isinstance(value, bool):
                normalized[key] = "true" if value else "false"
            else:
                normalized[key] = str(value)

        return normalized
