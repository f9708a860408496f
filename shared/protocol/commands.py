from __future__ import annotations

from enum import StrEnum
from typing import Dict, Optional, Union


class CommandName(StrEnum):
    """
    Reserved command names shared by client/server.
    Application data never uses these as names; it travels inside MESSAGE.
    """

    # Server -> client
    HEARTBEAT = "heartbeat"
    PONG = "pong"
    AUTH_STATUS = "authstatus"

    # Client -> server
    PING = "ping"
    AUTH = "auth"

    # Both directions
    MESSAGE = "msg"


class AuthStatus(StrEnum):
    """First argument of an authstatus command."""

    REQUIRED = "required"
    ERROR = "error"
    SUCCESS = "success"


COMMAND_SENDERS: Dict[str, str] = {
    CommandName.HEARTBEAT.value: "server",
    CommandName.PONG.value: "server",
    CommandName.AUTH_STATUS.value: "server",
    CommandName.PING.value: "client",
    CommandName.AUTH.value: "client",
    CommandName.MESSAGE.value: "both",
}


def normalize_command(command: Union[str, CommandName]) -> str:
    """Convert enum/string into canonical command text."""
    return command.value if isinstance(command, CommandName) else str(command)


def reserved_kind(value: Optional[str]) -> Optional[CommandName]:
    """Return the reserved name matching `value`, or None for anything else."""
    try:
        return CommandName(value)
    except ValueError:
        return None


def is_reserved(value: str) -> bool:
    """Check if `value` is a reserved protocol command."""
    return reserved_kind(value) is not None


def sent_by(command: Union[str, CommandName], role: str) -> bool:
    """Whether `role` ("server" or "client") may legitimately send `command`."""
    sender = COMMAND_SENDERS.get(normalize_command(command))
    return sender is not None and sender in (role, "both")


__all__ = [
    "CommandName",
    "AuthStatus",
    "COMMAND_SENDERS",
    "normalize_command",
    "reserved_kind",
    "is_reserved",
    "sent_by",
]
