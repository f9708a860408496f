from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Union

import jsonschema

from .commands import CommandName, normalize_command
from .errors import InvalidCommandError
from .messages import Command

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping command -> schema filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    CommandName.AUTH.value: "auth.json",
    CommandName.AUTH_STATUS.value: "authstatus.json",
    CommandName.PING.value: "no_args.json",
    CommandName.PONG.value: "no_args.json",
    CommandName.HEARTBEAT.value: "no_args.json",
    CommandName.MESSAGE.value: "msg.json",
}


def _schema_path(command: str) -> Optional[Path]:
    filename = SCHEMA_REGISTRY.get(command)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    return path if path.exists() else None


@lru_cache(maxsize=16)
def load_schema(command: Union[str, CommandName]) -> Optional[dict]:
    """Load the JSON schema for a command's argument list, if it has one."""
    path = _schema_path(normalize_command(command))
    if not path:
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_command(command: Command, schema: Optional[dict] = None) -> None:
    """Check a reserved command's arguments; non-reserved names pass through."""
    if not schema:
        schema = load_schema(command.name)
    if not schema:
        return
    try:
        jsonschema.validate(instance=list(command.args), schema=schema)
    except jsonschema.ValidationError as exc:
        raise InvalidCommandError(f"Invalid arguments for {command.name}: {exc.message}") from exc


__all__ = ["SCHEMA_REGISTRY", "load_schema", "validate_command"]
