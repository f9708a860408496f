from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping

from dotenv import load_dotenv


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_env_file(env_path: str = ".env") -> bool:
    """Load KEY=VALUE pairs from env_path into the environment if the file exists."""
    if Path(env_path).exists():
        return load_dotenv(env_path)
    return False


def coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def apply_env_overrides(target: Dict[str, Any], defaults: Mapping[str, Any], prefix: str) -> Dict[str, Any]:
    """Fill `target` from PREFIX_<KEY> environment variables, coerced to each default's type."""
    for key, default_value in defaults.items():
        env_key = f"{prefix}_{key.upper()}"
        value = os.getenv(env_key, default_value)
        target[key] = coerce_type(value, type(default_value))
    return target


def require_positive(config: Mapping[str, Any], *keys: str) -> None:
    for key in keys:
        if float(config[key]) <= 0:
            raise ConfigError(f"{key} must be positive")


def require_port(config: Mapping[str, Any], key: str) -> None:
    if not (1 <= int(config[key]) <= 65535):
        raise ConfigError(f"{key} must be between 1 and 65535")


__all__ = [
    "ConfigError",
    "load_env_file",
    "coerce_type",
    "apply_env_overrides",
    "require_positive",
    "require_port",
]
