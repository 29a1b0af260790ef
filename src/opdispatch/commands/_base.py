"""Click base classes for opdispatch commands.

Commands take an ``examples`` string. It is printed by an eager
``--examples`` flag, and ``--help`` ends with a pointer to that flag, so
help stays short while invocations against real targets are one flag away.
"""

from __future__ import annotations

import inspect
from typing import Any

import click

EXAMPLES_HINT = "Run with --examples for sample invocations."


class _ExamplesMixin:
    """Adds ``--examples`` to a Click command or group."""

    examples: str | None

    def _init_examples(self, examples: str | None) -> None:
        self.examples = inspect.cleandoc(examples) if examples else None
        if self.examples is None:
            return
        self.params.append(  # type: ignore[attr-defined]
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=self._show_examples,
                help="Show usage examples.",
            )
        )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or self.examples is None:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)  # type: ignore[misc]
        if self.examples is not None:
            formatter.write_paragraph()
            formatter.write_text(EXAMPLES_HINT)


class DispatchCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class DispatchGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands default to :class:`DispatchCommand`."""

    command_class = DispatchCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
