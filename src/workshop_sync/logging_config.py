"""
Centralized logging configuration for processes embedding the library.

``setup_logging`` configures the root logger once per process with:
- Console output (warnings only in user-friendly mode)
- File output to logs/{service_name}.log when a service name is given
- A fresh log file on each start unless SYNC_LOG_APPEND is set
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional

import orjson

from .config import env_bool, env_str

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_LOGGING_CONFIG_PATH = _PROJECT_ROOT / "config" / "logging_config.json"
_TECHNICAL_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_configured_log_directory() -> Optional[Path]:
    """Log directory from SYNC_LOG_DIRECTORY or logging_config.json, if set."""
    from_env = env_str("SYNC_LOG_DIRECTORY")
    if from_env:
        return Path(from_env).expanduser()
    if not _LOGGING_CONFIG_PATH.exists():
        return None
    config = orjson.loads(_LOGGING_CONFIG_PATH.read_bytes())
    log_dir = config.get("log_directory") if isinstance(config, dict) else None
    if not log_dir:
        return None
    return Path(log_dir).expanduser()


def _should_skip_logging_configuration(root_logger: logging.Logger, service_name: Optional[str]) -> bool:
    if not root_logger.handlers:
        return False
    has_console = any(
        isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler) for handler in root_logger.handlers
    )
    if not service_name:
        return has_console
    has_file = any(isinstance(handler, logging.FileHandler) for handler in root_logger.handlers)
    return has_console and has_file


def _reset_root_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        try:
            handler.close()
        except OSError as exc:
            _MODULE_LOGGER.debug("Handler close failed: %s", exc)
    root_logger.handlers = []


def _build_console_handler(user_friendly: bool) -> logging.Handler:
    if user_friendly:
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING if user_friendly else logging.DEBUG)
    return console_handler


def _configure_file_handler(service_name: Optional[str]) -> Optional[logging.Handler]:
    if not service_name:
        return None

    configured_dir = _get_configured_log_directory()
    logs_dir = configured_dir if configured_dir else _PROJECT_ROOT / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{service_name}.log"
    file_mode = "a" if env_bool("SYNC_LOG_APPEND", or_value=False) else "w"

    file_handler = logging.handlers.WatchedFileHandler(log_path, mode=file_mode)
    file_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.INFO)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("redis.asyncio").setLevel(logging.WARNING)


def setup_logging(service_name: Optional[str] = None, user_friendly: bool = False) -> None:
    """Configure logging for the application"""

    with _config_lock:
        root_logger = logging.getLogger()
        if _should_skip_logging_configuration(root_logger, service_name):
            return

        _reset_root_handlers(root_logger)
        root_logger.addHandler(_build_console_handler(user_friendly))

        file_handler = _configure_file_handler(service_name)
        if file_handler:
            root_logger.addHandler(file_handler)

        root_logger.setLevel(logging.INFO)
        _suppress_noisy_third_parties()


__all__ = ["setup_logging"]
