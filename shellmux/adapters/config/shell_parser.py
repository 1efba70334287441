"""
Shell configuration parser
"""
from typing import Dict, Any, List, Optional

from ...core.constants import DEFAULT_SSH_PORT, DEFAULT_SSH_TIMEOUT
from ...core.exceptions import ConfigError
from ...core.interfaces import PromptProvider
from ...core.utils import load_ssh_config
from ...domain.shell import ShellConfig, ErrorPolicy


# ============================================================
# Connection Parameters
# ============================================================

def resolve_connection_params(
    cfg: Dict[str, Any],
    prompt_provider: Optional[PromptProvider] = None,
) -> Dict[str, Any]:
    """
    Resolve remote connection parameters from merged configuration.

    Supports:
    - ssh_config: Load host/user/port/key from ~/.ssh/config
    - host/user/port/password/key: Direct configuration
    - Missing host/user/credentials are prompted for when a prompt provider is given

    Raises:
        ConfigError: If a required parameter is missing and cannot be prompted for
    """
    params: Dict[str, Any] = {}

    # Load from ssh_config if specified
    if cfg.get("ssh_config"):
        entry = load_ssh_config(cfg["ssh_config"])
        params.update({k: v for k, v in entry.items() if v is not None})
        if "key_file" in params:
            params["key"] = params.pop("key_file")

    # Direct configuration overrides ssh_config
    for key in ("host", "user", "port", "password"):
        if cfg.get(key) is not None:
            params[key] = cfg[key]
    if cfg.get("key"):
        params["key"] = cfg["key"]
    elif cfg.get("key_file"):
        params["key"] = cfg["key_file"]
    params["timeout"] = cfg.get("timeout", DEFAULT_SSH_TIMEOUT)

    # Prompt user for missing fields with defaults
    if not params.get("host"):
        if prompt_provider is None:
            raise ConfigError("Missing remote host")
        params["host"] = prompt_provider.prompt("Enter remote host address")
    if not params.get("user"):
        if prompt_provider is None:
            raise ConfigError("Missing SSH username")
        params["user"] = prompt_provider.prompt("Enter SSH username", default="root")

    try:
        params["port"] = int(params.get("port", DEFAULT_SSH_PORT))
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid SSH port: {params.get('port')}")

    # Prompt for password if neither password nor key is provided
    if not params.get("password") and not params.get("key") and prompt_provider is not None:
        password_input = prompt_provider.prompt("Enter SSH password", password=True, default="")
        params["password"] = password_input or None

    return params


# ============================================================
# Runner Settings
# ============================================================

def _as_int(section: Dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    value = section.get(key, default)
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"shell.{key} must be an integer, got: {value!r}")
    if result < minimum:
        raise ConfigError(f"shell.{key} must be >= {minimum}, got: {result}")
    return result


def _as_float(section: Dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"shell.{key} must be a number, got: {value!r}")
    if result < 0:
        raise ConfigError(f"shell.{key} must not be negative, got: {result}")
    return result


_BOOL_STRINGS = {"true": True, "yes": True, "false": False, "no": False}


def _as_bool(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[value.strip().lower()]
    raise ConfigError(f"shell.{key} must be true/false/yes/no, got: {value!r}")


def _as_policy(section: Dict[str, Any], key: str, default: ErrorPolicy) -> ErrorPolicy:
    value = section.get(key, default)
    try:
        return ErrorPolicy(value)
    except ValueError:
        choices = ", ".join(p.value for p in ErrorPolicy)
        raise ConfigError(f"shell.{key} must be one of {choices}, got: {value!r}")


def parse_shell_config(cfg: Dict[str, Any]) -> ShellConfig:
    """Build ShellConfig from the [shell] table, falling back to defaults"""
    section = cfg.get("shell", {})
    if not isinstance(section, dict):
        raise ConfigError("[shell] must be a table")

    defaults = ShellConfig()
    return ShellConfig(
        pty_type=str(section.get("pty_type", defaults.pty_type)),
        session_timeout_ms=_as_int(section, "session_timeout_ms", defaults.session_timeout_ms, 1),
        verbose=_as_bool(section, "verbose", defaults.verbose),
        ignore_timeout=_as_bool(section, "ignore_timeout", defaults.ignore_timeout),
        max_wait_seconds=_as_float(section, "max_wait_seconds", defaults.max_wait_seconds),
        poll_interval=_as_float(section, "poll_interval", defaults.poll_interval),
        chunk_size=_as_int(section, "chunk_size", defaults.chunk_size, 1),
        key_file=cfg.get("key") or cfg.get("key_file"),
        keepalive_interval_ms=_as_int(
            section, "keepalive_interval_ms", defaults.keepalive_interval_ms, 1000
        ),
        keepalive_max_missed=_as_int(section, "keepalive_max_missed", defaults.keepalive_max_missed),
        exec_error_policy=_as_policy(section, "exec_error_policy", defaults.exec_error_policy),
        shell_error_policy=_as_policy(section, "shell_error_policy", defaults.shell_error_policy),
    )


def parse_commands(cfg: Dict[str, Any]) -> List[str]:
    """Commands listed under ``commands`` in the configuration file"""
    commands = cfg.get("commands", [])
    if isinstance(commands, str):
        return [commands]
    if not isinstance(commands, list) or not all(isinstance(c, str) for c in commands):
        raise ConfigError("commands must be a list of strings")
    return commands
