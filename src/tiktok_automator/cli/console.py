"""Console output for the CLI.

Messages are escaped before printing: error texts such as "[mix] ..."
would otherwise be read as Rich markup tags.
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

THEME = Theme({
    "error": "bold red",
    "warning": "yellow",
    "success": "green",
    "info": "cyan",
    "detail": "dim",
})

# cp1252 consoles cannot draw Unicode boxes
console = Console(theme=THEME, safe_box=sys.platform == "win32")


def print_error(message: str, details: dict | None = None) -> None:
    """Print an error, then one indented line per detail."""
    console.print(f"[error]Error:[/error] {escape(message)}")
    for key, value in (details or {}).items():
        console.print(f"  [detail]{escape(str(key))}:[/detail] {escape(str(value))}")


def print_success(message: str) -> None:
    console.print(f"[success]{escape(message)}[/success]")


def print_info(message: str) -> None:
    console.print(f"[info]{escape(message)}[/info]")
