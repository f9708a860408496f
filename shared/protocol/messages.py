from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .commands import AuthStatus, CommandName, normalize_command, reserved_kind
from .constants import WRONG_PASSWORD_REASON
from .errors import MalformedCommandError


class Command(BaseModel):
    """A single protocol command: a name plus ordered string arguments."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Printable ASCII, no spaces")
    args: Tuple[str, ...] = Field(default=(), description="Opaque argument strings")
    kind: Optional[CommandName] = Field(default=None, description="Reserved name, None for anything else")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value or not all("!" <= ch <= "~" for ch in value):
            raise ValueError("command name must be printable ASCII without spaces")
        return value

    @model_validator(mode="before")
    @classmethod
    def _resolve_kind(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {**data, "kind": reserved_kind(data.get("name"))}
        return data

    @property
    def is_reserved(self) -> bool:
        return self.kind is not None

    @classmethod
    def of(cls, name: str | CommandName, *args: str) -> "Command":
        return cls(name=normalize_command(name), args=args)

    @classmethod
    def from_parts(cls, name: str, args: Iterable[str]) -> "Command":
        try:
            return cls(name=name, args=tuple(args))
        except ValidationError as exc:
            raise MalformedCommandError(f"Invalid command name {name!r}") from exc

    def arg(self, index: int, default: str = "") -> str:
        return self.args[index] if index < len(self.args) else default

    def __str__(self) -> str:
        return f"{self.name}{list(self.args)}"


def heartbeat_command() -> Command:
    return Command.of(CommandName.HEARTBEAT)


def ping_command() -> Command:
    return Command.of(CommandName.PING)


def pong_command() -> Command:
    return Command.of(CommandName.PONG)


def auth_command(password: str) -> Command:
    return Command.of(CommandName.AUTH, password)


def auth_required_command() -> Command:
    return Command.of(CommandName.AUTH_STATUS, AuthStatus.REQUIRED.value)


def auth_success_command(client_id: int) -> Command:
    return Command.of(CommandName.AUTH_STATUS, AuthStatus.SUCCESS.value, str(client_id))


def auth_error_command(reason: str = WRONG_PASSWORD_REASON) -> Command:
    return Command.of(CommandName.AUTH_STATUS, AuthStatus.ERROR.value, reason)


def message_command(text: str) -> Command:
    """Wrap an application payload; the only way application text goes on the wire."""
    return Command.of(CommandName.MESSAGE, text)


__all__ = [
    "Command",
    "heartbeat_command",
    "ping_command",
    "pong_command",
    "auth_command",
    "auth_required_command",
    "auth_success_command",
    "auth_error_command",
    "message_command",
]
