import pytest
from pydantic import ValidationError

from shared.protocol import (
    AuthStatus,
    Command,
    CommandName,
    InvalidCommandError,
    MalformedCommandError,
    auth_command,
    auth_error_command,
    auth_required_command,
    auth_success_command,
    decode_arg,
    decode_command,
    encode_arg,
    encode_command,
    encode_frame,
    heartbeat_command,
    is_reserved,
    message_command,
    sent_by,
    validate_command,
)


@pytest.mark.parametrize(
    "args",
    [
        (),
        ("hello",),
        ("hello world",),
        ("line1\nline2\r\n",),
        ("",),
        ("a", "", "b"),
        ("", ""),
        ("\x00\xff binary-ish \x7f",),
        ("emoji 🎮 and ünïcödé",),
        ("\ud800 lone surrogate",),
    ],
)
def test_encode_decode_roundtrip(args):
    command = Command(name="msg", args=args)
    assert decode_command(encode_command(command)) == command
    assert decode_command(encode_frame(command).rstrip(b"\n")) == command


def test_arg_encoding_is_base64_of_utf16le():
    assert encode_arg("pw") == "cAB3AA=="
    assert decode_arg("cAB3AA==") == "pw"
    assert encode_arg("") == ""


def test_encode_has_no_trailing_separator():
    assert encode_command(Command(name="ping")) == "ping"
    assert encode_command(auth_command("pw")) == "auth cAB3AA=="
    assert encode_frame(heartbeat_command()) == b"heartbeat\n"


def test_name_is_used_verbatim():
    command = decode_command(b"custom-name")
    assert command.name == "custom-name"
    assert command.args == ()
    assert command.kind is None


@pytest.mark.parametrize(
    "line",
    [
        "msg %%%invalid%%%",
        "msg cAB3AA",  # missing padding
        "msg QQ==",  # odd byte count is not UTF-16
        "",
        " cAB3AA==",
        "na\tme",
        b"caf\xc3\xa9",
    ],
)
def test_decode_rejects_malformed_lines(line):
    with pytest.raises(MalformedCommandError):
        decode_command(line)


def test_kind_is_resolved_once_at_construction():
    assert Command(name="msg", args=("x",)).kind is CommandName.MESSAGE
    assert decode_command("authstatus " + encode_arg("required")).kind is CommandName.AUTH_STATUS
    assert Command(name="other").kind is None
    # an explicit kind cannot contradict the name
    assert Command(name="ping", kind=CommandName.AUTH).kind is CommandName.PING


def test_command_is_immutable():
    command = message_command("hi")
    with pytest.raises(ValidationError):
        command.name = "ping"


def test_command_name_cannot_hold_spaces_or_newlines():
    with pytest.raises(ValidationError):
        Command(name="two words")
    with pytest.raises(ValidationError):
        Command(name="line\n")


def test_builders():
    assert auth_required_command().args == (AuthStatus.REQUIRED.value,)
    assert auth_success_command(7).args == ("success", "7")
    assert auth_error_command().args == ("error", "wrong password")
    assert message_command("hi").name == "msg"


def test_vocabulary():
    assert is_reserved("heartbeat")
    assert not is_reserved("chat")
    assert sent_by(CommandName.PING, "client")
    assert not sent_by(CommandName.PING, "server")
    assert sent_by(CommandName.MESSAGE, "server")
    assert sent_by("msg", "client")
    assert not sent_by("unknown", "client")


@pytest.mark.parametrize(
    "command",
    [
        auth_command("pw"),
        auth_command(""),
        auth_required_command(),
        auth_success_command(0),
        auth_error_command("nope"),
        heartbeat_command(),
        message_command(""),
        Command(name="not-reserved", args=("anything", "goes")),
    ],
)
def test_validate_accepts_well_formed_arguments(command):
    validate_command(command)


@pytest.mark.parametrize(
    "command",
    [
        Command(name="auth"),
        Command(name="auth", args=("a", "b")),
        Command(name="authstatus"),
        Command(name="authstatus", args=("success", "abc")),
        Command(name="authstatus", args=("success",)),
        Command(name="authstatus", args=("required", "extra")),
        Command(name="authstatus", args=("maybe",)),
        Command(name="ping", args=("x",)),
        Command(name="msg"),
        Command(name="msg", args=("a", "b")),
    ],
)
def test_validate_rejects_bad_arguments(command):
    with pytest.raises(InvalidCommandError):
        validate_command(command)
