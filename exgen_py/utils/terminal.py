"""Terminal output helpers: notifications, tables and user input."""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

LEVEL_STYLES = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "cyan",
}


class Notifier:
    """
    Fire-and-forget toast surface printed to the console.
    Every message is also kept in `history` as (level, text).
    """

    def __init__(self, out: Optional[Console] = None, debug: bool = False):
        self.console = out if out is not None else console
        self.debug_enabled = debug
        self.history: List[Tuple[str, str]] = []

    def notify(self, level: str, text: str) -> None:
        self.history.append((level, text))
        style = LEVEL_STYLES.get(level, "white")
        self.console.print(f"[{style}]{escape(text)}[/{style}]")

    def success(self, text: str) -> None:
        self.notify("success", text)

    def error(self, text: str) -> None:
        self.notify("error", text)

    def warning(self, text: str) -> None:
        self.notify("warning", text)

    def info(self, text: str) -> None:
        self.notify("info", text)

    def debug(self, text: str) -> None:
        if self.debug_enabled:
            self.console.print(f"[cyan]DEBUG: {escape(text)}[/cyan]")

    def last(self, level: Optional[str] = None) -> Optional[str]:
        """Most recent message text, optionally of one level."""
        for item_level, text in reversed(self.history):
            if level is None or item_level == level:
                return text
        return None


def choose_index(prompt: str, options: list, max_attempts: int = 3) -> Optional[int]:
    """
    Let user choose an index from a list of options.
    Returns the selected index or None if invalid.
    """
    for _ in range(max_attempts):
        try:
            choice = input(f"{prompt} (0-{len(options) - 1}): ")
            idx = int(choice)
            if 0 <= idx < len(options):
                return idx
            console.print(
                f"[red]Please enter a number between 0 and {len(options) - 1}[/red]"
            )
        except ValueError:
            console.print("[red]Please enter a valid number[/red]")
        except KeyboardInterrupt:
            console.print("\n[yellow]Cancelled[/yellow]")
            return None

    console.print("[red]Too many invalid attempts[/red]")
    return None


def create_table(title: Optional[str], headers: list) -> Table:
    """Create a formatted table for display."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for header in headers:
        table.add_column(header)
    return table


def format_verdict_color(description: str, passed: bool, pending: bool = False) -> str:
    """Format a judge verdict with appropriate color."""
    if passed:
        return f"[green]{description or 'Accepted'}[/green]"
    if pending:
        return f"[yellow]{description or 'Pending'}[/yellow]"

    upper = description.upper()
    if "TIME LIMIT" in upper or "MEMORY" in upper:
        return f"[magenta]{description}[/magenta]"
    return f"[red]{description or 'Failed'}[/red]"


def shorten(text: Optional[str], limit: int = 200) -> str:
    """Trim, cut and escape text for single-cell display."""
    text = (text or "").strip()
    if len(text) > limit:
        text = text[:limit] + "..."
    return escape(text)
