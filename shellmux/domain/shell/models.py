"""
Shell domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, List

from ...core.constants import (
    DEFAULT_PTY_TYPE,
    DEFAULT_SESSION_TIMEOUT_MS,
    DEFAULT_MAX_WAIT_SECONDS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_KEEPALIVE_INTERVAL_MS,
    DEFAULT_KEEPALIVE_MAX_MISSED,
)


class ErrorPolicy(str, Enum):
    """
    What a runner does when the remote side fails mid-invocation.
    - propagate: release resources, then raise
    - best_effort: release resources, log, return an empty result
    """
    PROPAGATE = "propagate"
    BEST_EFFORT = "best_effort"


@dataclass
class ShellConfig:
    """
    Runner tuning

    Attributes:
        pty_type: Terminal type negotiated for shell channels
        session_timeout_ms: Timeout for blocking channel operations (not the read loops)
        verbose: Echo commands and every received chunk to the log; the CLI also
            raises paramiko's protocol logging to DEBUG
        ignore_timeout: Drain shell output until the channel closes instead of
            waiting at most max_wait_seconds
        max_wait_seconds: Bound for the bounded-wait shell collection mode
        poll_interval: Seconds to wait for data between empty polls
        chunk_size: Bytes requested per channel read
        key_file: Private key identity used by sessions the runner creates
        keepalive_interval_ms: Transport keep-alive interval
        keepalive_max_missed: Keep-alive probes allowed to go unanswered
        exec_error_policy: Error policy for one-shot exec channels
        shell_error_policy: Error policy for shell channels
    """
    pty_type: str = DEFAULT_PTY_TYPE
    session_timeout_ms: int = DEFAULT_SESSION_TIMEOUT_MS
    verbose: bool = True
    ignore_timeout: bool = False
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    key_file: Optional[str] = None
    keepalive_interval_ms: int = DEFAULT_KEEPALIVE_INTERVAL_MS
    keepalive_max_missed: int = DEFAULT_KEEPALIVE_MAX_MISSED
    exec_error_policy: ErrorPolicy = ErrorPolicy.BEST_EFFORT
    shell_error_policy: ErrorPolicy = ErrorPolicy.PROPAGATE


@dataclass
class ExecResult:
    """One-shot exec invocation result; exit_code is None when no status was captured"""
    output: str = ""
    exit_code: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass
class ShellResult:
    """
    Shell invocation result.

    exit_code is only captured in unbounded-drain mode. timed_out is set when
    bounded-wait mode hit max_wait_seconds before the remote side finished,
    in which case the transcript may be incomplete.
    """
    transcript: str = ""
    exit_code: Optional[int] = None
    timed_out: bool = False


@dataclass
class CommandOutputMap:
    """
    Per-command output buckets recovered from a marker-wrapped transcript.

    Keys are command indexes in submission order. Each bucket starts with the
    command text itself, followed by the lines the command produced.
    """
    buckets: Dict[int, List[str]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.buckets)

    def __contains__(self, index: int) -> bool:
        return index in self.buckets

    def __getitem__(self, index: int) -> List[str]:
        return self.buckets[index]

    def pop_command_output(self, command: str) -> List[str]:
        """
        Remove and return the output lines of the first bucket seeded with ``command``.

        The lookup is destructive: the bucket is dropped from the map, so a
        second lookup for the same text finds the next identical command, or
        nothing.
        """
        for index in sorted(self.buckets):
            bucket = self.buckets[index]
            if bucket and bucket[0] == command:
                del self.buckets[index]
                return bucket[1:]
        return []
