from __future__ import annotations

from collections.abc import Callable
from typing import Dict, TYPE_CHECKING

from shared.protocol import Command, CommandName, InvalidCommandError

if TYPE_CHECKING:
    from .connection import Connection

Handler = Callable[[Command, "Connection"], None]


class CommandRouter:
    """Maps reserved commands accepted from authenticated clients to handlers."""

    def __init__(self) -> None:
        self._handlers: Dict[CommandName, Handler] = {}

    def register(self, command: CommandName, handler: Handler) -> None:
        self._handlers[command] = handler

    def handles(self, command: CommandName) -> bool:
        return command in self._handlers

    def dispatch(self, command: Command, conn: "Connection") -> None:
        handler = self._handlers.get(command.kind) if command.kind else None
        if handler is None:
            raise InvalidCommandError(f"Command {command.name!r} is not accepted from clients")
        handler(command, conn)
