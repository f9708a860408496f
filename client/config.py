from __future__ import annotations

import logging
from typing import Any, Dict

from shared.protocol.constants import DEFAULT_PING_INTERVAL
from shared.settings import ConfigError, apply_env_overrides, load_env_file, require_port, require_positive

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_host": "127.0.0.1",
    "server_port": 7777,
    "password": "",
    "ping_interval": DEFAULT_PING_INTERVAL,
    "ignore_message_handler_exceptions": False,
    "connect_timeout": 5.0,
    "tick_interval": 1 / 60,
    "reconnect_backoff": 1,
    "max_reconnect_backoff": 30,
    "max_reconnect_retries": 0,
    "log_level": "INFO",
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables."""
    load_env_file(env_path)
    apply_env_overrides(CLIENT_CONFIG, DEFAULT_CONFIG, "CLIENT")
    _validate_config()
    logging.getLogger().setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _validate_config() -> None:
    require_port(CLIENT_CONFIG, "server_port")
    require_positive(CLIENT_CONFIG, "ping_interval", "connect_timeout", "tick_interval")
    if CLIENT_CONFIG["max_reconnect_retries"] < 0:
        raise ConfigError("max_reconnect_retries must not be negative")


def get(key: str, default: Any = None) -> Any:
    return CLIENT_CONFIG.get(key, default)


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "get", "load_config"]
