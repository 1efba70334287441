"""
shellmux - remote command execution over SSH

Runs commands on remote hosts through paramiko sessions:
- One-shot exec channels returning output and exit status
- Interactive shell channels fed a batch of commands
- Bounded-wait or drain-until-closed shell output collection
- Per-command output recovery from a shell transcript via echoed markers
"""

__version__ = "0.1.0"

# Export core components
from .core import (
    RemoteSession,
    SessionConfig,
    RemoteError,
    ConfigError,
    ConnectionError,
    ChannelError,
    load_ssh_config,
)

# Export domain models
from .domain.shell import (
    ShellRunner,
    ShellConfig,
    ErrorPolicy,
    ExecResult,
    ShellResult,
    CommandOutputMap,
    wrap_commands,
    clean_output,
    demultiplex,
)

__all__ = [
    # Version
    "__version__",
    # Session
    "RemoteSession",
    "SessionConfig",
    # Errors
    "RemoteError",
    "ConfigError",
    "ConnectionError",
    "ChannelError",
    # Utilities
    "load_ssh_config",
    # Runner
    "ShellRunner",
    "ShellConfig",
    "ErrorPolicy",
    "ExecResult",
    "ShellResult",
    "CommandOutputMap",
    # Demultiplexing
    "wrap_commands",
    "clean_output",
    "demultiplex",
]
