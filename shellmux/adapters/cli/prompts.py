"""
Rich-based user prompts
"""
from typing import Optional
from rich.console import Console
from rich.prompt import Prompt

from ...core.interfaces import PromptProvider
from ...core.logging import get_stderr_console


class RichPromptProvider(PromptProvider):
    """
    Rich-based prompt provider.

    Prompts go to stderr so that stdout carries only remote output.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stderr_console()

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input; password input is hidden and its default never shown"""
        if default and not password:
            message = f"{message} (default: {default})"
        if default is None:
            return Prompt.ask(message, password=password, console=self.console)
        return Prompt.ask(
            message,
            password=password,
            default=default,
            show_default=False,
            console=self.console,
        )
