from __future__ import annotations

import logging
from typing import Any, Dict

from shared.protocol.constants import DEFAULT_HEARTBEAT_INTERVAL
from shared.settings import apply_env_overrides, load_env_file, require_port, require_positive

logger = logging.getLogger(__name__)

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 7777,
    "password": "",
    "heartbeat_interval": DEFAULT_HEARTBEAT_INTERVAL,
    "ignore_message_handler_exceptions": True,
    "kick_after_wrong_password": True,
    "session_lifetime": float("inf"),
    "tick_interval": 1 / 60,
    "log_level": "INFO",
}

SERVER_CONFIG = DEFAULT_SERVER_CONFIG.copy()


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    load_env_file(env_path)
    apply_env_overrides(SERVER_CONFIG, DEFAULT_SERVER_CONFIG, "SERVER")
    validate_server_config(SERVER_CONFIG)
    if not SERVER_CONFIG["password"]:
        logger.warning("Password not specified, clients are authenticated on connect")
    return SERVER_CONFIG


def validate_server_config(config: Dict[str, Any]) -> None:
    require_port(config, "port")
    require_positive(config, "heartbeat_interval", "session_lifetime", "tick_interval")


__all__ = ["DEFAULT_SERVER_CONFIG", "SERVER_CONFIG", "load_server_config", "validate_server_config"]
