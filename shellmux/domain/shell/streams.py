"""
Channel stream helpers shared by the exec and shell runners
"""
import codecs
import select
import sys
from typing import Callable, List, Optional

import paramiko

OutputCallback = Callable[[str], None]


def write_stderr(data: str) -> None:
    sys.stderr.write(data)
    sys.stderr.flush()


class ChannelReader:
    """
    Drains whatever a paramiko channel has buffered, without blocking.

    Bytes are decoded incrementally so a UTF-8 sequence split across two
    reads is not mangled. Decoded chunks are accumulated and passed to an
    optional callback as they arrive.
    """

    def __init__(
        self,
        channel: paramiko.Channel,
        chunk_size: int,
        on_output: Optional[OutputCallback] = None,
        on_error: Optional[OutputCallback] = None,
    ):
        self.channel = channel
        self.chunk_size = chunk_size
        self.on_output = on_output
        self.on_error = on_error
        self._out_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._err_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._out: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._out)

    def drain(self) -> bool:
        """
        Read everything currently available on stdout and stderr.

        Returns:
            True if any bytes were read
        """
        got_data = False

        while self.channel.recv_ready():
            data = self.channel.recv(self.chunk_size)
            if not data:
                break
            got_data = True
            chunk = self._out_decoder.decode(data)
            if chunk:
                self._out.append(chunk)
                if self.on_output:
                    self.on_output(chunk)

        while self.channel.recv_stderr_ready():
            data = self.channel.recv_stderr(self.chunk_size)
            if not data:
                break
            got_data = True
            chunk = self._err_decoder.decode(data)
            if chunk and self.on_error:
                self.on_error(chunk)

        return got_data

    def finish(self) -> str:
        """Flush any partial multi-byte sequence and return the full text"""
        tail = self._out_decoder.decode(b"", final=True)
        if tail:
            self._out.append(tail)
            if self.on_output:
                self.on_output(tail)
        return self.text


def channel_finished(channel: paramiko.Channel) -> bool:
    """True once the remote side closed the channel and nothing is left to read"""
    closed = channel.closed or (channel.eof_received and channel.exit_status_ready())
    return closed and not channel.recv_ready() and not channel.recv_stderr_ready()


def wait_for_data(channel: paramiko.Channel, timeout: float) -> None:
    """Block until the channel becomes readable or ``timeout`` seconds pass"""
    if timeout <= 0:
        return
    select.select([channel], [], [], timeout)
