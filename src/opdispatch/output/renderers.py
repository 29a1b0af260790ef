"""Command-specific Rich renderers for InvocationResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from opdispatch.output.console import create_console, get_output, style_for_state

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from opdispatch.output.result import InvocationResult


def render_result(result: InvocationResult, *, verbose: bool = False) -> str:
    """Render an InvocationResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: InvocationResult) -> None:
    label = Text("OK", style="od.ok")
    op = Text(f"  {result.op}", style="od.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="od.key")
    if key == "state":
        v = Text(str(value), style=style_for_state(str(value)))
    elif isinstance(value, dict | list):
        v = Text(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _type_name(hint: str | None) -> str:
    return hint or "-"


# ── Renderers ─────────────────────────────────────────────────────────


def _render_generic(result: InvocationResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_services(result: InvocationResult, console: Console, *, verbose: bool = False) -> None:
    """Render the service catalogue as one table row per operation."""
    _status_line(console, result)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Service", style="od.service", no_wrap=True)
    table.add_column("Operation", style="od.operation")
    if verbose:
        table.add_column("Key", style="dim")
    table.add_column("Input", style="od.type")
    table.add_column("Output", style="od.type")

    for svc in result.data.get("services", []):
        for op in svc.get("operations", []):
            row = [svc["name"], op["name"]]
            if verbose:
                row.append(op.get("key", ""))
            row.extend([_type_name(op.get("input_type")), _type_name(op.get("output_type"))])
            table.add_row(*row)

    console.print(table)


def _render_error(result: InvocationResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="od.error")
    op = Text(f"  {result.op}", style="od.op")
    code = Text(f" [{err.code}]" if err else "")
    console.print(label, op, code, Text(": "), Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "services": _render_services,
}
