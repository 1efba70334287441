"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.logging import setup_logging
from .run import register_run_commands

# Create main app
app = typer.Typer(
    name="shellmux",
    add_completion=False,
    help="Run commands on remote hosts over SSH exec and shell channels",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register exec and shell commands directly (not as subcommands)
register_run_commands(app)


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
):
    """
    shellmux - remote command runner

    Use subcommands to perform different operations:
    - exec: Run one command on an exec channel
    - shell: Send a batch of commands to an interactive shell
    """
    setup_logging(level=log_level, log_file=log_file)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
