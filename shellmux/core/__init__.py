"""
Core infrastructure layer
"""
from .client import RemoteSession, SessionConfig
from .constants import *
from .exceptions import *
from .logging import (
    setup_logging,
    set_transport_verbosity,
    get_logger,
    get_stdout_console,
    get_stderr_console,
)
from .interfaces import SessionFactory, PromptProvider
from .utils import load_ssh_config, parse_target

__all__ = [
    "RemoteSession",
    "SessionConfig",
    "RemoteError",
    "ConfigError",
    "ConnectionError",
    "ChannelError",
    "setup_logging",
    "set_transport_verbosity",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "SessionFactory",
    "PromptProvider",
    "load_ssh_config",
    "parse_target",
]
