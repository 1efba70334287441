"""
Exec and shell CLI commands
"""
import typer
from pathlib import Path
from typing import Optional, Dict, Any, List

from rich.panel import Panel
from rich.text import Text

from ...core.constants import SSH_CONFIG_PATH, LAST_EXIT_CODE_UNSET, TIMED_OUT_EXIT_CODE
from ...core.exceptions import RemoteError, ConfigError
from ...core.logging import (
    get_logger,
    get_stdout_console,
    get_stderr_console,
    set_transport_verbosity,
)
from ...core.utils import load_ssh_config, parse_target
from ...domain.shell import ShellRunner, ShellConfig
from ..config.loader import ConfigLoader
from ..config.shell_parser import resolve_connection_params, parse_shell_config, parse_commands
from .connection import RemoteSessionFactory
from .prompts import RichPromptProvider

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()
prompt_provider = RichPromptProvider()


def register_run_commands(app: typer.Typer) -> None:
    """Register exec and shell commands on the main app"""
    app.command(name="exec")(exec_run)
    app.command(name="shell")(shell_run)


# ============================================================
# Shared helpers
# ============================================================

def _resolve_target(target: str) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Turn ``[user@]host[:port]`` into config layers, expanding ssh_config aliases.

    Returns:
        (ssh_config layer with the lowest priority, target overrides with the highest)
    """
    parts = parse_target(target)
    ssh_layer: Dict[str, Any] = {}

    if Path(SSH_CONFIG_PATH).expanduser().exists():
        entry = load_ssh_config(parts["host"])
        parts["host"] = entry["host"]
        ssh_layer = {"user": entry["user"], "port": entry["port"], "key": entry["key_file"]}

    return ssh_layer, dict(parts)


def _load_settings(
    target: str,
    config_path: Optional[str],
    user: Optional[str],
    port: Optional[int],
    password: Optional[str],
    key: Optional[str],
    shell_overrides: Optional[Dict[str, Any]] = None,
) -> tuple[Dict[str, Any], Dict[str, Any], ShellConfig]:
    """Merge TOML, env and CLI settings; returns (raw config, connection params, shell config)"""
    ssh_layer, overrides = _resolve_target(target)
    if user:
        overrides["user"] = user
    if port:
        overrides["port"] = port
    if password:
        overrides["password"] = password
    if key:
        overrides["key"] = key
    if shell_overrides:
        overrides["shell"] = shell_overrides

    toml_path = Path(config_path).expanduser() if config_path else None
    loader = ConfigLoader()
    cfg = loader.merge_configs(
        {k: v for k, v in ssh_layer.items() if v is not None},
        loader.load(toml_path=toml_path, cli_overrides=overrides),
    )

    params = resolve_connection_params(cfg, prompt_provider)
    shell_config = parse_shell_config(cfg)
    set_transport_verbosity(shell_config.verbose)
    if params.get("key"):
        shell_config.key_file = params["key"]
    return cfg, params, shell_config


def _live_printer(live: bool):
    if not live:
        return None
    return lambda chunk: stdout_console.out(chunk, end="", highlight=False)


# ============================================================
# Commands
# ============================================================

def exec_run(
    target: str = typer.Argument(..., help="[user@]host[:port] or ~/.ssh/config alias"),
    command: str = typer.Argument(..., help="Command to run on an exec channel"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path (TOML)"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="SSH username"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="SSH port"),
    password: Optional[str] = typer.Option(None, "--password", help="SSH password"),
    key: Optional[str] = typer.Option(None, "--key", "-i", help="Private key file"),
    live: bool = typer.Option(False, "--live", help="Print output as it arrives"),
):
    """
    Run one command on an exec channel and exit with its status

    Examples:
        shellmux exec root@10.0.0.5 "uname -a"
        shellmux exec my-alias "df -h" --live
    """
    try:
        _, params, shell_config = _load_settings(target, config_path, user, port, password, key)
        runner = ShellRunner(shell_config, on_output=_live_printer(live))
        session = RemoteSessionFactory(shell_config).create(params)

        result = runner.run_exec(session, command)
    except RemoteError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not live:
        stdout_console.out(result.output, end="", highlight=False)
    if result.exit_code is None:
        stderr_console.print("[yellow]⚠[/yellow] No exit status was captured")
        raise typer.Exit(1)
    raise typer.Exit(result.exit_code)


def shell_run(
    target: str = typer.Argument(..., help="[user@]host[:port] or ~/.ssh/config alias"),
    commands: Optional[List[str]] = typer.Argument(None, help="Commands sent to the shell, in order"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path (TOML)"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="SSH username"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="SSH port"),
    password: Optional[str] = typer.Option(None, "--password", help="SSH password"),
    key: Optional[str] = typer.Option(None, "--key", "-i", help="Private key file"),
    split: bool = typer.Option(False, "--split", help="Print output per command using echoed markers"),
    ignore_timeout: Optional[bool] = typer.Option(
        None, "--ignore-timeout/--bounded", help="Drain until the shell exits instead of waiting at most --max-wait"
    ),
    max_wait: Optional[float] = typer.Option(None, "--max-wait", help="Seconds to wait in bounded mode"),
    pty_type: Optional[str] = typer.Option(None, "--pty", help="Pseudo-terminal type"),
    live: bool = typer.Option(False, "--live", help="Print output as it arrives"),
):
    """
    Send a batch of commands to one interactive shell

    Exits with the shell's status with --ignore-timeout, 124 when the bounded
    wait expired before the shell finished, and 0 otherwise.

    Examples:
        shellmux shell root@10.0.0.5 "cd /tmp" "ls -la"
        shellmux shell my-alias "uptime" "free -m" --split
        shellmux shell my-alias --config batch.toml --ignore-timeout
    """
    try:
        cfg, params, shell_config = _load_settings(
            target,
            config_path,
            user,
            port,
            password,
            key,
            shell_overrides={
                "ignore_timeout": ignore_timeout,
                "max_wait_seconds": max_wait,
                "pty_type": pty_type,
            },
        )
        batch = list(commands) if commands else parse_commands(cfg)
        if not batch:
            raise ConfigError("No commands given")

        runner = ShellRunner(shell_config, on_output=_live_printer(live))
        session = RemoteSessionFactory(shell_config).create(params)

        if split:
            output_map = runner.run_shell_split(session, *batch)
            _print_split(runner, batch, output_map)
            exit_code = 0
            if shell_config.ignore_timeout:
                exit_code = runner.last_exit_code
                if exit_code == LAST_EXIT_CODE_UNSET:
                    exit_code = 1
        else:
            result = runner.run_shell(session, *batch)
            if not live:
                stdout_console.out(result.transcript, end="", highlight=False)
            exit_code = result.exit_code or 0

        if runner.last_timed_out:
            stderr_console.print(
                f"[yellow]⚠[/yellow] Shell still running after {shell_config.max_wait_seconds}s, output may be incomplete"
            )
            exit_code = TIMED_OUT_EXIT_CODE
    except RemoteError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Shell invocation failed")
        stderr_console.print(f"[red]Error:[/red] Shell invocation failed: {e}")
        raise typer.Exit(1)

    raise typer.Exit(exit_code)


def _print_split(runner: ShellRunner, batch: List[str], output_map) -> None:
    for command in batch:
        lines = runner.get_output_lines_for_command(command, output_map)
        body = Text("\n".join(lines)) if lines else Text("(no output captured)", style="dim")
        stdout_console.print(Panel(body, title=Text(command), title_align="left", border_style="blue"))
