"""
One-shot exec channel runner
"""
from typing import Optional

from ...core.client import RemoteSession
from ...core.logging import get_logger
from . import streams
from .models import ShellConfig, ExecResult
from .streams import ChannelReader, OutputCallback, write_stderr

logger = get_logger(__name__)


def run_exec_channel(
    session: RemoteSession,
    command: str,
    config: ShellConfig,
    on_output: Optional[OutputCallback] = None,
    on_error: Optional[OutputCallback] = write_stderr,
) -> ExecResult:
    """
    Run ``command`` on an exec channel of a connected session.

    Stdin is closed straight away. Remote stderr goes to ``on_error``
    (local stderr by default). Stdout is read in ``config.chunk_size``
    pieces until the remote side closes the channel, then the exit status
    is collected. The channel is always closed before returning.

    Returns:
        ExecResult with the accumulated stdout and the remote exit status
    """
    if config.verbose:
        logger.info(f"command: {command}")

    channel = session.open_exec_channel(command)
    try:
        channel.settimeout(config.session_timeout_ms / 1000)
        channel.shutdown_write()

        def echo(chunk: str) -> None:
            if config.verbose:
                logger.info(chunk)
            if on_output:
                on_output(chunk)

        reader = ChannelReader(channel, config.chunk_size, on_output=echo, on_error=on_error)
        while True:
            reader.drain()
            if streams.channel_finished(channel):
                break
            streams.wait_for_data(channel, config.poll_interval)

        exit_code = channel.recv_exit_status()
        logger.info(f"exit-status: {exit_code}")
        return ExecResult(output=reader.finish(), exit_code=exit_code)
    finally:
        channel.close()
