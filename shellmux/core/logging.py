"""
Rich-based logging for runners and the CLI

Runner loggers live under ``shellmux.*``; paramiko's protocol logging is
routed through the same handlers and gated separately.
"""
import logging
from typing import Optional
from pathlib import Path

from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_traceback


# Consoles resolve sys.stdout / sys.stderr on every write, so redirected
# streams (pipes, test runners) receive the output
_stdout_console = Console()
_stderr_console = Console(stderr=True)

install_traceback(show_locals=False, width=120)

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TRANSPORT_LOGGER = "paramiko"


# ============================================================
# Handlers
# ============================================================

def _console_handler(level: int, rich_tracebacks: bool) -> logging.Handler:
    # Remote output is logged verbatim; markup would mangle brackets in it
    handler = RichHandler(
        console=_stderr_console,
        show_time=True,
        show_path=level <= logging.DEBUG,
        rich_tracebacks=rich_tracebacks,
        markup=False,
        show_level=True,
    )
    handler.setLevel(level)
    return handler


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    return handler


# ============================================================
# Setup
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> None:
    """
    Install stderr (and optional file) handlers on the root logger.

    Replaces any handlers installed by a previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, parent directories are created
        rich_tracebacks: Render exception tracebacks with rich
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    root_logger.addHandler(_console_handler(log_level, rich_tracebacks))
    if log_file:
        root_logger.addHandler(_file_handler(log_file, log_level))


def set_transport_verbosity(verbose: bool) -> None:
    """Route paramiko's own protocol logging at DEBUG when verbose, WARNING otherwise"""
    logging.getLogger(TRANSPORT_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)


# ============================================================
# Accessors
# ============================================================

def get_logger(name: str) -> logging.Logger:
    """Logger for a module, usually called with ``__name__``"""
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Console for remote output and results"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Console for errors, warnings and prompts"""
    return _stderr_console
