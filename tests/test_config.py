"""Tests for configuration loading and parsing."""

import os
from pathlib import Path
from typing import Optional

import pytest

from shellmux.adapters.config.loader import ConfigLoader
from shellmux.adapters.config.shell_parser import (
    parse_commands,
    parse_shell_config,
    resolve_connection_params,
)
from shellmux.core.exceptions import ConfigError
from shellmux.core.interfaces import PromptProvider
from shellmux.core.utils import parse_target
from shellmux.domain.shell import ErrorPolicy


class ScriptedPrompts(PromptProvider):
    """Prompt provider answering from a dict keyed by message prefix."""

    def __init__(self, answers: dict):
        self.answers = answers
        self.asked: list = []

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        self.asked.append(message)
        for prefix, answer in self.answers.items():
            if message.startswith(prefix):
                return answer
        return default or ""


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SHELLMUX_* variables inherited from the environment."""
    for key in list(os.environ):
        if key.startswith("SHELLMUX_"):
            monkeypatch.delenv(key)


@pytest.fixture
def toml_file(tmp_path: Path) -> Path:
    path = tmp_path / "batch.toml"
    path.write_text(
        'host = "10.0.0.5"\n'
        'user = "deploy"\n'
        "port = 2222\n"
        'commands = ["hostname", "uptime"]\n'
        "\n"
        "[shell]\n"
        'pty_type = "vt100"\n'
        "max_wait_seconds = 30\n"
        "ignore_timeout = true\n"
    )
    return path


class TestConfigLoader:
    """Priority merging."""

    def test_loads_toml(self, clean_env: None, toml_file: Path) -> None:
        cfg = ConfigLoader().load(toml_path=toml_file)

        assert cfg["host"] == "10.0.0.5"
        assert cfg["shell"]["pty_type"] == "vt100"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader().load_toml(tmp_path / "absent.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.toml"
        path.write_text("host = \n")

        with pytest.raises(ConfigError, match="Failed to parse"):
            ConfigLoader().load_toml(path)

    def test_env_overrides_toml(
        self, clean_env: None, toml_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SHELLMUX_PORT", "2200")
        monkeypatch.setenv("SHELLMUX_MAX_WAIT", "5")
        monkeypatch.setenv("SHELLMUX_VERBOSE", "false")

        cfg = ConfigLoader().load(toml_path=toml_file)

        assert cfg["port"] == 2200
        assert cfg["shell"]["max_wait_seconds"] == 5
        assert cfg["shell"]["verbose"] is False
        assert cfg["shell"]["pty_type"] == "vt100"

    def test_cli_overrides_env(
        self, clean_env: None, toml_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SHELLMUX_USER", "from-env")

        cfg = ConfigLoader().load(
            toml_path=toml_file,
            cli_overrides={"user": "from-cli", "port": None, "shell": {"pty_type": None}},
        )

        assert cfg["user"] == "from-cli"
        assert cfg["port"] == 2222
        assert cfg["shell"]["pty_type"] == "vt100"

    def test_env_value_conversion(self) -> None:
        loader = ConfigLoader()

        assert loader._convert_value("yes") is True
        assert loader._convert_value("22") == 22
        assert loader._convert_value("0.5") == 0.5
        assert loader._convert_value("dumb") == "dumb"


class TestParseShellConfig:
    """[shell] table parsing."""

    def test_defaults(self) -> None:
        config = parse_shell_config({})

        assert config.pty_type == "dumb"
        assert config.max_wait_seconds == 10
        assert config.ignore_timeout is False
        assert config.session_timeout_ms == 100000
        assert config.keepalive_interval_ms == 120000
        assert config.keepalive_max_missed == 1000
        assert config.exec_error_policy is ErrorPolicy.BEST_EFFORT
        assert config.shell_error_policy is ErrorPolicy.PROPAGATE

    def test_values_from_table(self) -> None:
        config = parse_shell_config({
            "key": "~/.ssh/id_ed25519",
            "shell": {
                "pty_type": "xterm",
                "ignore_timeout": True,
                "chunk_size": 4096,
                "exec_error_policy": "propagate",
            },
        })

        assert config.pty_type == "xterm"
        assert config.ignore_timeout is True
        assert config.chunk_size == 4096
        assert config.key_file == "~/.ssh/id_ed25519"
        assert config.exec_error_policy is ErrorPolicy.PROPAGATE

    @pytest.mark.parametrize(
        "section, message",
        [
            ({"max_wait_seconds": "soon"}, "must be a number"),
            ({"max_wait_seconds": -1}, "must not be negative"),
            ({"chunk_size": 0}, "must be >= 1"),
            ({"keepalive_interval_ms": 10}, "must be >= 1000"),
            ({"shell_error_policy": "ignore"}, "must be one of"),
        ],
    )
    def test_invalid_values(self, section: dict, message: str) -> None:
        with pytest.raises(ConfigError, match=message):
            parse_shell_config({"shell": section})

    @pytest.mark.parametrize(
        "raw, expected",
        [(True, True), (False, False), ("false ", False), ("Yes", True), ("no", False)],
    )
    def test_boolean_flags(self, raw, expected: bool) -> None:
        config = parse_shell_config({"shell": {"ignore_timeout": raw, "verbose": raw}})

        assert config.ignore_timeout is expected
        assert config.verbose is expected

    @pytest.mark.parametrize("raw", ["off", "0.0", "", 1, 0])
    def test_invalid_boolean_flags(self, raw) -> None:
        with pytest.raises(ConfigError, match="must be true/false/yes/no"):
            parse_shell_config({"shell": {"ignore_timeout": raw}})

    def test_invalid_boolean_from_env(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SHELLMUX_IGNORE_TIMEOUT", "off")

        with pytest.raises(ConfigError, match="shell.ignore_timeout"):
            parse_shell_config(ConfigLoader().load())

    def test_shell_must_be_table(self) -> None:
        with pytest.raises(ConfigError):
            parse_shell_config({"shell": "fast"})


class TestResolveConnectionParams:
    """Connection parameter resolution."""

    def test_direct_values(self) -> None:
        params = resolve_connection_params(
            {"host": "h", "user": "u", "port": "2200", "password": "p"}
        )

        assert params == {"host": "h", "user": "u", "port": 2200, "password": "p", "timeout": 10}

    def test_missing_host_without_prompts(self) -> None:
        with pytest.raises(ConfigError, match="host"):
            resolve_connection_params({"user": "u"})

    def test_prompts_for_missing_values(self) -> None:
        prompts = ScriptedPrompts({"Enter remote host": "prompted-host", "Enter SSH password": "pw"})

        params = resolve_connection_params({}, prompts)

        assert params["host"] == "prompted-host"
        assert params["user"] == "root"
        assert params["port"] == 22
        assert params["password"] == "pw"

    def test_key_skips_password_prompt(self) -> None:
        prompts = ScriptedPrompts({})

        params = resolve_connection_params({"host": "h", "user": "u", "key_file": "~/.ssh/k"}, prompts)

        assert params["key"] == "~/.ssh/k"
        assert prompts.asked == []

    def test_invalid_port(self) -> None:
        with pytest.raises(ConfigError, match="port"):
            resolve_connection_params({"host": "h", "user": "u", "port": "ssh"})


class TestParseCommands:
    """Command list parsing."""

    def test_list(self) -> None:
        assert parse_commands({"commands": ["a", "b"]}) == ["a", "b"]

    def test_single_string(self) -> None:
        assert parse_commands({"commands": "uptime"}) == ["uptime"]

    def test_missing(self) -> None:
        assert parse_commands({}) == []

    def test_invalid(self) -> None:
        with pytest.raises(ConfigError):
            parse_commands({"commands": [1, 2]})


class TestParseTarget:
    """[user@]host[:port] parsing."""

    @pytest.mark.parametrize(
        "target, expected",
        [
            ("example.com", {"host": "example.com", "user": None, "port": None}),
            ("root@example.com", {"host": "example.com", "user": "root", "port": None}),
            ("root@example.com:2222", {"host": "example.com", "user": "root", "port": 2222}),
            ("example.com:22", {"host": "example.com", "user": None, "port": 22}),
        ],
    )
    def test_parts(self, target: str, expected: dict) -> None:
        assert parse_target(target) == expected

    def test_invalid_port(self) -> None:
        with pytest.raises(ConfigError):
            parse_target("example.com:ssh")

    def test_missing_host(self) -> None:
        with pytest.raises(ConfigError):
            parse_target("root@")
