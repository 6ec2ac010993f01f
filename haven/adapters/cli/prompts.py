"""
Rich-based user prompts
"""
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from ...core.interfaces import PromptProvider
from ...core.logging import get_stdout_console


class RichPromptProvider(PromptProvider):
    """Rich-based prompt provider"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stdout_console()

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        # An empty default only allows "press Enter" prompts
        if default:
            formatted_message = f"{message} (default: {default})"
        else:
            formatted_message = message

        answer = Prompt.ask(
            formatted_message,
            default=default,
            password=password,
            console=self.console,
            show_default=False,
        )
        return answer if answer is not None else ""

    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        return Confirm.ask(message, default=default, console=self.console)

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan] {escape(message)}", highlight=False)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", highlight=False)

    def panel(self, content: str, title: str = "", border_style: str = "blue") -> None:
        """Display content in a panel"""
        self.console.print(Panel(content, title=title, border_style=border_style))
