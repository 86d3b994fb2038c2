"""Readers for file-based configuration fallbacks."""

from .dotenv_loader import DotenvLoader, parse_dotenv_line
from .json_config_loader import JsonConfigLoader

__all__ = [
    "DotenvLoader",
    "JsonConfigLoader",
    "parse_dotenv_line",
]
