"""Protocol-wide constants shared by client and server."""

WIRE_ENCODING = "ascii"
ARG_ENCODING = "utf-16-le"
FRAME_DELIMITER = b"\n"
ARG_SEPARATOR = " "
READ_BUFFER_SIZE = 4096
MAX_LINE_SIZE = 256 * 1024  # 256 KB upper bound for a single unterminated line
DEFAULT_PING_INTERVAL = 5.0  # seconds
DEFAULT_HEARTBEAT_INTERVAL = 5.0  # seconds
WRONG_PASSWORD_REASON = "wrong password"

__all__ = [
    "WIRE_ENCODING",
    "ARG_ENCODING",
    "FRAME_DELIMITER",
    "ARG_SEPARATOR",
    "READ_BUFFER_SIZE",
    "MAX_LINE_SIZE",
    "DEFAULT_PING_INTERVAL",
    "DEFAULT_HEARTBEAT_INTERVAL",
    "WRONG_PASSWORD_REASON",
]
