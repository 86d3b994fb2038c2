"""Exception types for configuration handling."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or malformed."""

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg)

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)


__all__ = ["ConfigurationError"]
