from __future__ import annotations

import math

import pytest

from client import config as client_config_module
from server import config as server_config_module
from shared.settings import ConfigError, apply_env_overrides, coerce_type, load_env_file


@pytest.fixture(autouse=True)
def restore_globals():
    yield
    server_config_module.SERVER_CONFIG.clear()
    server_config_module.SERVER_CONFIG.update(server_config_module.DEFAULT_SERVER_CONFIG)
    client_config_module.CLIENT_CONFIG.clear()
    client_config_module.CLIENT_CONFIG.update(client_config_module.DEFAULT_CONFIG)


@pytest.mark.parametrize(
    "value, target, expected",
    [
        ("8080", int, 8080),
        ("2.5", float, 2.5),
        ("inf", float, math.inf),
        ("true", bool, True),
        ("On", bool, True),
        ("0", bool, False),
        (3, int, 3),
    ],
)
def test_coerce_type(value, target, expected):
    assert coerce_type(value, target) == expected


def test_coerce_type_rejects_garbage():
    with pytest.raises(ConfigError):
        coerce_type("seven", int)


def test_env_overrides_use_prefix(monkeypatch):
    monkeypatch.setenv("DEMO_PORT", "9000")
    monkeypatch.setenv("DEMO_ENABLED", "false")
    target = {}
    apply_env_overrides(target, {"port": 1, "enabled": True, "name": "x"}, "DEMO")
    assert target == {"port": 9000, "enabled": False, "name": "x"}


def test_server_config_from_environment(monkeypatch):
    monkeypatch.setenv("SERVER_PASSWORD", "secret")
    monkeypatch.setenv("SERVER_PORT", "8123")
    monkeypatch.setenv("SERVER_KICK_AFTER_WRONG_PASSWORD", "no")
    config = server_config_module.load_server_config(env_path="does-not-exist.env")
    assert config["password"] == "secret"
    assert config["port"] == 8123
    assert config["kick_after_wrong_password"] is False
    assert config["session_lifetime"] == math.inf


def test_server_config_rejects_bad_port(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "70000")
    with pytest.raises(ConfigError):
        server_config_module.load_server_config(env_path="does-not-exist.env")


def test_server_config_rejects_non_positive_interval(monkeypatch):
    monkeypatch.setenv("SERVER_HEARTBEAT_INTERVAL", "0")
    with pytest.raises(ConfigError):
        server_config_module.load_server_config(env_path="does-not-exist.env")


def test_client_config_from_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / "client.env"
    env_file.write_text("CLIENT_PING_INTERVAL=0.5\nCLIENT_PASSWORD=pw\n")
    # register the keys so monkeypatch removes whatever load_dotenv sets
    monkeypatch.setenv("CLIENT_PING_INTERVAL", "")
    monkeypatch.delenv("CLIENT_PING_INTERVAL")
    monkeypatch.setenv("CLIENT_PASSWORD", "")
    monkeypatch.delenv("CLIENT_PASSWORD")

    config = client_config_module.load_config(env_path=str(env_file))
    assert config["ping_interval"] == 0.5
    assert config["password"] == "pw"
    assert client_config_module.get("password") == "pw"


def test_client_config_rejects_negative_retries(monkeypatch):
    monkeypatch.setenv("CLIENT_MAX_RECONNECT_RETRIES", "-1")
    with pytest.raises(ConfigError):
        client_config_module.load_config(env_path="does-not-exist.env")


def test_missing_env_file_is_ignored(tmp_path):
    assert load_env_file(str(tmp_path / "missing.env")) is False
