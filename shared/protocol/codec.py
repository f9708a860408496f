"""
Line codec.

A command travels as ``name (' ' arg)*`` where every argument is base64 over
the UTF-16-LE bytes of the string. Arguments can therefore hold spaces,
newlines or any other character without disturbing framing; the name is sent
verbatim.
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

from .constants import ARG_ENCODING, ARG_SEPARATOR, FRAME_DELIMITER, WIRE_ENCODING
from .errors import MalformedCommandError
from .messages import Command


def encode_arg(text: str) -> str:
    """Transform one argument into its base64 wire token."""
    return base64.b64encode(text.encode(ARG_ENCODING, "surrogatepass")).decode(WIRE_ENCODING)


def decode_arg(token: str) -> str:
    """Inverse of encode_arg; raises MalformedCommandError on invalid tokens."""
    try:
        raw = base64.b64decode(token, validate=True)
        return raw.decode(ARG_ENCODING, "surrogatepass")
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise MalformedCommandError(f"Invalid argument encoding: {token[:32]!r}") from exc


def encode_command(command: Command) -> str:
    """Encode a command into a single line without the trailing delimiter."""
    return ARG_SEPARATOR.join([command.name, *(encode_arg(arg) for arg in command.args)])


def decode_command(line: Union[str, bytes]) -> Command:
    """Decode a single line (delimiter already stripped) into a Command."""
    if isinstance(line, (bytes, bytearray)):
        try:
            line = bytes(line).decode(WIRE_ENCODING)
        except UnicodeDecodeError as exc:
            raise MalformedCommandError("Command line is not ASCII") from exc
    name, *tokens = line.split(ARG_SEPARATOR)
    if not name:
        raise MalformedCommandError("Empty command name")
    return Command.from_parts(name, [decode_arg(token) for token in tokens])


def encode_frame(command: Command) -> bytes:
    """Encode a command into bytes ready to be written to a transport."""
    return encode_command(command).encode(WIRE_ENCODING) + FRAME_DELIMITER


__all__ = ["encode_arg", "decode_arg", "encode_command", "decode_command", "encode_frame"]
