"""Rich Console factory and theme for opdispatch output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DISPATCH_THEME = Theme(
    {
        "od.ok": "bold green",
        "od.error": "bold red",
        "od.op": "bold cyan",
        "od.key": "dim",
        "od.service": "bold blue",
        "od.operation": "bold",
        "od.type": "magenta",
        "od.state.running": "yellow",
        "od.state.succeeded": "green",
        "od.state.failed": "red",
        "od.state.canceled": "dim",
    }
)


def create_console() -> Console:
    """Create a 120-column Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=DISPATCH_THEME,
        highlight=False,
        width=120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_state(state: str) -> str:
    """Return the Rich style name for an operation state."""
    if state in {"running", "succeeded", "failed", "canceled"}:
        return f"od.state.{state}"
    return ""
