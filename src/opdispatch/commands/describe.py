"""Command: list the services and operations a target exposes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from opdispatch.commands._base import DispatchCommand
from opdispatch.commands._context import TargetError
from opdispatch.output.result import InvocationResult

if TYPE_CHECKING:
    from opdispatch.commands._context import AppContext
    from opdispatch.service.definition import ServiceDefinition


def type_label(hint: Any) -> str | None:
    """Readable name for an operation type hint (``None`` when untyped)."""
    if hint is None:
        return None
    if isinstance(hint, type):
        return hint.__qualname__
    return str(hint)


def describe_service(definition: ServiceDefinition) -> dict[str, Any]:
    return {
        "name": definition.name,
        "operations": [
            {
                "key": key,
                "name": op.name,
                "input_type": type_label(op.input_type),
                "output_type": type_label(op.output_type),
            }
            for key, op in definition.operations.items()
        ],
    }


@click.command(
    cls=DispatchCommand,
    examples="""\
  opdispatch services myapp.services:registry
  opdispatch --json services myapp.services:orders_handler""",
)
@click.argument("target")
@click.pass_obj
def services(app: AppContext, target: str) -> None:
    """List services and operations exposed by TARGET (module:attribute)."""
    try:
        registry = app.registry(target)
    except TargetError as exc:
        app.emit(InvocationResult.failure("services", "INVALID_TARGET", str(exc)))
        return

    app.emit(
        InvocationResult.success(
            "services",
            {"services": [describe_service(d) for d in registry.services]},
        )
    )
