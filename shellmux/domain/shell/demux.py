"""
Per-command output recovery for batched shell invocations.

A shell channel returns one undelimited transcript for the whole batch. To
attribute output to commands, every command is wrapped in two echoed marker
lines before it is sent:

    echo @START<i>@T= $( date +%T )
    <command i>
    echo @END<i>@T= $( date +%T )

The transcript is then walked line by line with a two-state parser:

- awaiting_start(i): lines are dropped until one contains ``@START<i>@``,
  which opens bucket i seeded with the command text.
- in_command(i): lines are appended to bucket i until one contains
  ``@END<i>@``, which moves the parser to awaiting_start(i + 1).

A repeated start marker for the current index reopens its bucket, and an end
marker seen while still awaiting its start advances the index without a
bucket. Missing or truncated markers therefore leave commands without a
bucket instead of raising.
"""
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from ...core.constants import START_MARKER, END_MARKER, MARKER_TIMESTAMP
from .models import CommandOutputMap


def start_marker(index: int) -> str:
    return START_MARKER.format(index=index)


def end_marker(index: int) -> str:
    return END_MARKER.format(index=index)


def wrap_commands(commands: Sequence[str]) -> List[str]:
    """Surround each command with its start and end marker echo lines"""
    wrapped: List[str] = []
    for index, command in enumerate(commands):
        wrapped.append(f"echo {start_marker(index)}{MARKER_TIMESTAMP}")
        wrapped.append(command)
        wrapped.append(f"echo {end_marker(index)}{MARKER_TIMESTAMP}")
    return wrapped


def clean_output(output: Optional[str]) -> List[str]:
    """
    Strip carriage returns and tabs, then split into lines.

    Trailing empty lines are dropped, so "a\\nb\\n" gives ["a", "b"].
    """
    if output is None:
        return []
    lines = output.replace("\r", "").replace("\t", "").split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    return lines


class ParserState(str, Enum):
    AWAITING_START = "awaiting_start"
    IN_COMMAND = "in_command"


class CommandDemultiplexer:
    """Marker parser for a single batch of commands"""

    def __init__(self, commands: Sequence[str]):
        self.commands = list(commands)
        self.index = 0
        self.state = ParserState.AWAITING_START
        self.result = CommandOutputMap()

    def feed(self, line: str) -> None:
        index = self.index

        if start_marker(index) in line:
            # Lines past the last submitted command have nowhere to go
            if index < len(self.commands):
                self.result.buckets[index] = [self.commands[index]]
                self.state = ParserState.IN_COMMAND
            return

        if end_marker(index) in line:
            self.index += 1
            self.state = ParserState.AWAITING_START
            return

        if self.state is ParserState.IN_COMMAND:
            self.result.buckets[index].append(line)

    def feed_lines(self, lines: Iterable[str]) -> CommandOutputMap:
        for line in lines:
            self.feed(line)
        return self.result


def demultiplex(commands: Sequence[str], transcript: Optional[str]) -> CommandOutputMap:
    """Split a marker-wrapped transcript into per-command buckets"""
    return CommandDemultiplexer(commands).feed_lines(clean_output(transcript))
