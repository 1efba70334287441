"""
Shell domain module
"""
from .models import (
    ShellConfig,
    ErrorPolicy,
    ExecResult,
    ShellResult,
    CommandOutputMap,
)
from .service import ShellRunner
from .exec_runner import run_exec_channel
from .shell_runner import run_shell_channel
from .demux import wrap_commands, clean_output, demultiplex, CommandDemultiplexer

__all__ = [
    "ShellConfig",
    "ErrorPolicy",
    "ExecResult",
    "ShellResult",
    "CommandOutputMap",
    "ShellRunner",
    "run_exec_channel",
    "run_shell_channel",
    "wrap_commands",
    "clean_output",
    "demultiplex",
    "CommandDemultiplexer",
]
