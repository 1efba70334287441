"""
Shell domain service - session-scoped exec and shell invocations
"""
from typing import Callable, List, Optional, TypeVar

import paramiko

from ...core.client import RemoteSession
from ...core.constants import DEFAULT_SSH_PORT, LAST_EXIT_CODE_UNSET
from ...core.exceptions import ChannelError
from ...core.logging import get_logger
from .demux import wrap_commands, demultiplex
from .exec_runner import run_exec_channel
from .models import ShellConfig, ErrorPolicy, ExecResult, ShellResult, CommandOutputMap
from .shell_runner import run_shell_channel
from .streams import OutputCallback, write_stderr

logger = get_logger(__name__)

T = TypeVar("T")


class ShellRunner:
    """
    Runs commands over SSH sessions.

    Every invocation connects the session if needed and disconnects it
    afterwards, on success and on failure alike, so a session serves a
    single invocation. Failures are raised or logged according to the
    configured ErrorPolicy of the channel kind.

    The exit status of the most recent invocation is kept in
    ``last_exit_code`` in addition to being returned on each result, and
    ``last_timed_out`` tells whether the most recent shell run hit its wait
    bound (``run_shell_split`` returns only the per-command map).
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        on_output: Optional[OutputCallback] = None,
        on_error: Optional[OutputCallback] = write_stderr,
    ):
        """
        Initialize runner.

        Args:
            config: Runner tuning (defaults if None)
            on_output: Callback receiving every decoded output chunk as it arrives
            on_error: Callback receiving exec stderr chunks (local stderr by default)
        """
        self.config = config or ShellConfig()
        self.on_output = on_output
        self.on_error = on_error
        self._last_exit_code = LAST_EXIT_CODE_UNSET
        self.last_timed_out = False

    # --------------------
    # Exit code state
    # --------------------
    @property
    def last_exit_code(self) -> int:
        if self._last_exit_code == LAST_EXIT_CODE_UNSET:
            logger.warning(
                f"Exit Code was not set with last action!, so is {LAST_EXIT_CODE_UNSET}"
            )
        return self._last_exit_code

    @last_exit_code.setter
    def last_exit_code(self, value: int) -> None:
        self._last_exit_code = value

    def _record_exit_code(self, exit_code: Optional[int]) -> None:
        self._last_exit_code = LAST_EXIT_CODE_UNSET if exit_code is None else exit_code

    # --------------------
    # Sessions
    # --------------------
    def get_session(
        self,
        username: str,
        host: str,
        port: int = DEFAULT_SSH_PORT,
        password: Optional[str] = None,
    ) -> RemoteSession:
        """Build an unconnected session using this runner's identity and keep-alive settings"""
        return RemoteSession(
            host=host,
            user=username,
            port=port,
            password=password,
            key_path=self.config.key_file,
            keepalive_interval_ms=self.config.keepalive_interval_ms,
            keepalive_max_missed=self.config.keepalive_max_missed,
        )

    def _invoke(
        self,
        session: RemoteSession,
        policy: ErrorPolicy,
        operation: Callable[[], T],
        empty: Callable[[], T],
    ) -> T:
        """
        Connect if needed, run ``operation``, always disconnect.

        KeyboardInterrupt is never swallowed; it propagates after cleanup
        under either policy.
        """
        try:
            if not session.is_connected:
                session.connect()
            return operation()
        except Exception as e:
            if policy is ErrorPolicy.BEST_EFFORT:
                logger.error(f"Remote invocation on {session.config} failed: {e}")
                return empty()
            if isinstance(e, (paramiko.SSHException, OSError, EOFError)):
                raise ChannelError(f"Channel I/O failed on {session.config}: {e}") from e
            raise
        finally:
            session.disconnect()

    # --------------------
    # Invocations
    # --------------------
    def run_exec(self, session: RemoteSession, command: str) -> ExecResult:
        """
        Run one command on an exec channel.

        Under the default best-effort policy this never raises; on failure the
        error is logged and an empty ExecResult is returned.
        """
        self._record_exit_code(None)

        def operation() -> ExecResult:
            return run_exec_channel(
                session,
                command,
                self.config,
                on_output=self.on_output,
                on_error=self.on_error,
            )

        result = self._invoke(session, self.config.exec_error_policy, operation, ExecResult)
        self._record_exit_code(result.exit_code)
        return result

    def run_shell(self, session: RemoteSession, *commands: str) -> ShellResult:
        """
        Run a batch of commands in one interactive shell.

        Raises:
            ConnectionError: If the session cannot be connected
            ChannelError: On channel I/O failure (under the default propagate policy)
        """
        self._record_exit_code(None)
        self.last_timed_out = False

        def operation() -> ShellResult:
            return run_shell_channel(session, commands, self.config, on_output=self.on_output)

        result = self._invoke(session, self.config.shell_error_policy, operation, ShellResult)
        self.last_timed_out = result.timed_out
        self._record_exit_code(result.exit_code)
        return result

    def run_shell_split(self, session: RemoteSession, *commands: str) -> CommandOutputMap:
        """Run a batch in one shell and split the transcript back into per-command output"""
        result = self.run_shell(session, *wrap_commands(commands))
        return demultiplex(commands, result.transcript)

    @staticmethod
    def get_output_lines_for_command(
        command: Optional[str],
        output_map: Optional[CommandOutputMap],
    ) -> List[str]:
        """Destructively look up one command's output lines; empty if absent"""
        if command is None or not output_map:
            return []
        return output_map.pop_command_output(command)
