from __future__ import annotations

from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Error codes for each failure class of the protocol."""

    PROTOCOL_ERROR = 1000
    MALFORMED_COMMAND = 1001
    INVALID_COMMAND = 1002
    NOT_AUTHENTICATED = 1003
    UNKNOWN_CONNECTION = 1004
    TRANSPORT_FAILURE = 1005


class ProtocolError(Exception):
    """Structured protocol exception carrying an error code + message."""

    default_code = ErrorCode.PROTOCOL_ERROR

    def __init__(self, message: str = "", code: Optional[ErrorCode] = None) -> None:
        self.code = code if code is not None else self.default_code
        self.message = message
        super().__init__(f"{self.code.name} ({int(self.code)}): {message}")


class MalformedCommandError(ProtocolError):
    """A line could not be decoded into a command."""

    default_code = ErrorCode.MALFORMED_COMMAND


class InvalidCommandError(ProtocolError):
    """A well-formed command that is not valid in the current state or role."""

    default_code = ErrorCode.INVALID_COMMAND


class NotAuthenticatedError(ProtocolError):
    """A protected command was used before authentication succeeded."""

    default_code = ErrorCode.NOT_AUTHENTICATED


class UnknownConnectionError(ProtocolError):
    """An operation referenced a connection id that is not active."""

    default_code = ErrorCode.UNKNOWN_CONNECTION

    def __init__(self, connection_id: int) -> None:
        self.connection_id = connection_id
        super().__init__(f"No active connection with id {connection_id}")


class TransportError(ProtocolError):
    """I/O failure while reading, writing or closing a transport."""

    default_code = ErrorCode.TRANSPORT_FAILURE


__all__ = [
    "ErrorCode",
    "ProtocolError",
    "MalformedCommandError",
    "InvalidCommandError",
    "NotAuthenticatedError",
    "UnknownConnectionError",
    "TransportError",
]
