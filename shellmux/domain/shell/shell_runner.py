"""
Interactive shell channel runner
"""
import time
from typing import Optional, Sequence

from ...core.client import RemoteSession
from ...core.constants import EXIT_COMMAND
from ...core.logging import get_logger
from . import streams
from .models import ShellConfig, ShellResult
from .streams import ChannelReader, OutputCallback

logger = get_logger(__name__)


def send_batch(channel, commands: Sequence[str]) -> None:
    """Write each command as a line, then ``exit``, then close the channel's input"""
    for command in commands:
        channel.sendall(f"{command}\n".encode())
    channel.sendall(f"{EXIT_COMMAND}\n".encode())
    channel.shutdown_write()


def _collect_bounded(channel, reader: ChannelReader, config: ShellConfig) -> bool:
    """
    Collect until end-of-stream or ``max_wait_seconds``, whichever is first.

    Returns:
        True if the wait bound was hit before end-of-stream
    """
    deadline = time.monotonic() + config.max_wait_seconds
    while True:
        reader.drain()
        if channel.eof_received or channel.closed:
            reader.drain()
            return False
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            reader.drain()
            return True
        streams.wait_for_data(channel, min(config.poll_interval, remaining))


def _collect_until_closed(channel, reader: ChannelReader, config: ShellConfig) -> int:
    """Drain until the remote side closes the channel and return its exit status"""
    while True:
        reader.drain()
        if config.verbose:
            logger.debug("Should be done reading from input stream")
        if streams.channel_finished(channel):
            break
        streams.wait_for_data(channel, config.poll_interval)

    exit_code = channel.recv_exit_status()
    logger.info(f"exit-status: {exit_code}")
    return exit_code


def run_shell_channel(
    session: RemoteSession,
    commands: Sequence[str],
    config: ShellConfig,
    on_output: Optional[OutputCallback] = None,
) -> ShellResult:
    """
    Send a batch of commands to an interactive shell of a connected session.

    With ``config.ignore_timeout`` unset (the default) output is collected
    for at most ``config.max_wait_seconds``; no exit status is available in
    that mode and long-running batches are cut short. With it set, output is
    drained until the shell exits and the exit status is captured.

    The channel is always closed before returning or raising.
    """
    channel = session.open_shell_channel(config.pty_type)
    try:
        channel.settimeout(config.session_timeout_ms / 1000)

        def echo(chunk: str) -> None:
            if config.verbose:
                logger.debug(chunk)
            if on_output:
                on_output(chunk)

        # Shell channels run on a pty, so stderr arrives merged into stdout
        reader = ChannelReader(channel, config.chunk_size, on_output=echo)
        send_batch(channel, commands)

        if not config.ignore_timeout:
            timed_out = _collect_bounded(channel, reader, config)
            if timed_out:
                logger.warning(
                    f"Shell output not finished after {config.max_wait_seconds}s, "
                    "transcript may be incomplete"
                )
            result = ShellResult(transcript=reader.finish(), timed_out=timed_out)
        else:
            exit_code = _collect_until_closed(channel, reader, config)
            result = ShellResult(transcript=reader.finish(), exit_code=exit_code)

        if config.verbose:
            logger.debug(result.transcript)
        return result
    finally:
        channel.close()
