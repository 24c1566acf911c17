from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from rich.console import Console

# screens reachable from the profile list
HOME_SCREEN = "Home"
CREATE_PROFILE_SCREEN = "CreateProfile"


class Navigator(ABC):
    @abstractmethod
    def navigate(self, target: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Move to another screen, passing optional route params."""
        pass


class ConsoleNavigator(Navigator):
    """Prints navigation requests; remembers them for the caller."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.history: List[Tuple[str, Optional[Dict[str, Any]]]] = []

    def navigate(self, target: str, params: Optional[Dict[str, Any]] = None) -> None:
        self.history.append((target, params))
        if params:
            details = ", ".join(f"{k}={v}" for k, v in params.items())
            self.console.print(f"[blue]→[/blue] {target} [dim]({details})[/dim]")
        else:
            self.console.print(f"[blue]→[/blue] {target}")
