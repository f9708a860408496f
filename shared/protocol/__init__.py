"""
Shared protocol package that centralizes the command vocabulary, the Command model,
the line codec and framer, and argument validation for both client and server.
"""

from .codec import decode_arg, decode_command, encode_arg, encode_command, encode_frame
from .commands import AuthStatus, CommandName, is_reserved, normalize_command, reserved_kind, sent_by
from .constants import (
    ARG_ENCODING,
    DEFAULT_HEARTBEAT_INTERVAL,
    DEFAULT_PING_INTERVAL,
    FRAME_DELIMITER,
    READ_BUFFER_SIZE,
    WIRE_ENCODING,
    WRONG_PASSWORD_REASON,
)
from .errors import (
    ErrorCode,
    InvalidCommandError,
    MalformedCommandError,
    NotAuthenticatedError,
    ProtocolError,
    TransportError,
    UnknownConnectionError,
)
from .framing import LineFramer
from .messages import (
    Command,
    auth_command,
    auth_error_command,
    auth_required_command,
    auth_success_command,
    heartbeat_command,
    message_command,
    ping_command,
    pong_command,
)
from .validator import load_schema, validate_command

__all__ = [
    "CommandName",
    "AuthStatus",
    "is_reserved",
    "normalize_command",
    "reserved_kind",
    "sent_by",
    "ARG_ENCODING",
    "DEFAULT_HEARTBEAT_INTERVAL",
    "DEFAULT_PING_INTERVAL",
    "FRAME_DELIMITER",
    "READ_BUFFER_SIZE",
    "WIRE_ENCODING",
    "WRONG_PASSWORD_REASON",
    "ErrorCode",
    "ProtocolError",
    "MalformedCommandError",
    "InvalidCommandError",
    "NotAuthenticatedError",
    "UnknownConnectionError",
    "TransportError",
    "encode_arg",
    "decode_arg",
    "encode_command",
    "decode_command",
    "encode_frame",
    "LineFramer",
    "Command",
    "heartbeat_command",
    "ping_command",
    "pong_command",
    "auth_command",
    "auth_required_command",
    "auth_success_command",
    "auth_error_command",
    "message_command",
    "load_schema",
    "validate_command",
]
