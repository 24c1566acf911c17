"""user-facing confirmation and alert surfaces."""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional
from rich.console import Console
from rich.prompt import Confirm


class ConfirmationSurface(ABC):
    """confirm/cancel dialogs and dismiss-only alerts."""

    @abstractmethod
    async def confirm(self, title: str, message: str) -> bool:
        """
        present a blocking choice.

        returns:
            True if the user confirmed, False if they cancelled
        """
        pass

    @abstractmethod
    async def notify(self, title: str, message: str) -> None:
        """show an informational alert."""
        pass


class ConsoleConfirmationSurface(ConfirmationSurface):
    """terminal dialogs built on rich prompts."""

    def __init__(self, console: Optional[Console] = None, assume_yes: bool = False):
        """
        args:
            console: optional rich console instance. if not provided, creates new one.
            assume_yes: if True, every confirmation is accepted without asking
        """
        self.console = console or Console()
        self.assume_yes = assume_yes

    async def confirm(self, title: str, message: str) -> bool:
        if self.assume_yes:
            return True

        self.console.print(f"[bold yellow]{title}[/bold yellow]")
        # prompting blocks on stdin, keep it off the event loop
        return await asyncio.to_thread(
            Confirm.ask, message, console=self.console, default=False
        )

    async def notify(self, title: str, message: str) -> None:
        style = "red" if title.lower() == "error" else "green"
        self.console.print(f"[{style}]{title}:[/{style}] {message}")
