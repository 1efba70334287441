"""Shared fixtures for the shellmux test suite."""

import time
from typing import List
from unittest.mock import patch

import pytest

from shellmux.domain.shell import ShellConfig


def _fake_wait(channel, timeout):
    time.sleep(min(timeout, 0.005))
    if hasattr(channel, "tick"):
        channel.tick()


@pytest.fixture(autouse=True)
def fast_wait():
    """Replace select-based waiting with a short sleep that advances fake channels."""
    with patch("shellmux.domain.shell.streams.wait_for_data", side_effect=_fake_wait) as mock:
        yield mock


@pytest.fixture
def config() -> ShellConfig:
    """Quiet runner config with short bounds."""
    return ShellConfig(verbose=False, max_wait_seconds=0.5, poll_interval=0.01)


@pytest.fixture
def transcript_for():
    """Build the transcript a shell would print for marker-wrapped commands."""

    def build(outputs: List[List[str]], banner: str = "Last login: today") -> str:
        lines = [banner]
        for index, command_lines in enumerate(outputs):
            lines.append(f"@START{index}@T= 12:00:0{index}")
            lines.extend(command_lines)
            lines.append(f"@END{index}@T= 12:00:0{index}")
        lines.append("logout")
        return "\r\n".join(lines) + "\r\n"

    return build
