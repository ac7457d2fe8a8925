"""User-facing notifications, separate from the log stream."""

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.markup import escape


class Notifier(ABC):
    """Surface for messages the user must see."""

    @abstractmethod
    def show_error_message(self, message: str) -> None:
        pass


class ConsoleNotifier(Notifier):
    """Prints notifications to the terminal."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    def show_error_message(self, message: str) -> None:
        self.console.print(f"[red]Error:[/red] {escape(message)}", style="bold")
