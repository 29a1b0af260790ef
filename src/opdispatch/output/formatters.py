"""Rich/JSON output helpers.

The CLI renders InvocationResult for humans (Rich tables and styled
fields) or machines (--json). The formatter layer adapts the result to
the requested output mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from opdispatch.output.renderers import render_result

if TYPE_CHECKING:
    from opdispatch.output.result import InvocationResult


class OutputSettings(BaseModel):
    """Output mode flags, derived from the global CLI options."""

    model_config = {"frozen": True}

    json_output: bool = False
    verbose: bool = False


def format_result(result: InvocationResult, *, settings: OutputSettings | None = None) -> str:
    """Format an InvocationResult for display.

    JSON mode returns the full model dump; otherwise Rich renders a
    human-readable view (error detail and extra columns when verbose).
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    return render_result(result, verbose=settings.verbose)
