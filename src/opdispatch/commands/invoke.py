"""Commands: drive one dispatch method against a target in-process.

``start``, ``info``, ``result`` and ``cancel`` build the matching operation
context, run the registry method on a fresh event loop, and emit an
InvocationResult. Handler and operation errors become error results with
exit code 1.
"""

from __future__ import annotations

import asyncio
import base64
import json
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import click

from opdispatch.commands._base import DispatchCommand
from opdispatch.commands._context import TargetError
from opdispatch.domain.errors import DispatchError, OperationStillRunningError
from opdispatch.handler.context import (
    CancelOperationContext,
    GetOperationInfoContext,
    GetOperationResultContext,
    StartOperationContext,
)
from opdispatch.output.result import InvocationResult
from opdispatch.serialization.lazy_value import LazyValue
from opdispatch.serialization.serializers import JSON_CONTENT_TYPE

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from opdispatch.commands._context import AppContext
    from opdispatch.handler.registry import ServiceRegistry


def _parse_headers(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            msg = f"Expected KEY=VALUE, got '{raw}'"
            raise click.BadParameter(msg)
        headers[key.strip().lower()] = value
    return headers


def _validate_json(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> str | None:
    if value is None:
        return None
    try:
        json.loads(value)
    except json.JSONDecodeError as exc:
        msg = f"Not valid JSON: {exc}"
        raise click.BadParameter(msg) from exc
    return value


async def _payload_fields(value: LazyValue) -> dict[str, Any]:
    """Decode an outbound payload into JSON-safe result fields."""
    decoded = await value.consume()
    fields: dict[str, Any] = {"content_type": value.headers.get("content-type")}
    if isinstance(decoded, bytes):
        fields["value"] = base64.b64encode(decoded).decode("ascii")
        fields["encoding"] = "base64"
    else:
        fields["value"] = decoded
    return fields


def _run(app: AppContext, op: str, target: str, body: Any) -> None:
    """Resolve *target*, run ``body(registry)`` and emit its outcome."""
    try:
        registry = app.registry(target)
    except TargetError as exc:
        app.emit(InvocationResult.failure(op, "INVALID_TARGET", str(exc)))
        return

    coro: Coroutine[Any, Any, dict[str, Any]] = body(registry)
    try:
        data = asyncio.run(coro)
    except (DispatchError, OperationStillRunningError) as exc:
        app.emit(InvocationResult.from_exception(op, exc))
        return
    app.emit(InvocationResult.success(op, data))


_TARGET_ARGS = [
    click.argument("target"),
    click.argument("service_name", metavar="SERVICE"),
    click.argument("operation_name", metavar="OPERATION"),
]


def _target_args(fn: Any) -> Any:
    for decorator in reversed(_TARGET_ARGS):
        fn = decorator(fn)
    return fn


_header_option = click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    callback=_parse_headers,
    help="Request header as KEY=VALUE (repeatable).",
)


@click.command(
    cls=DispatchCommand,
    examples="""\
  opdispatch start myapp.services:registry echo echo --input '"hello"'
  opdispatch start myapp.services:registry orders place --input '{"sku": "A1"}'
  opdispatch --json start myapp.services:registry orders place -H request-id=42""",
)
@_target_args
@click.option(
    "--input",
    "input_json",
    default=None,
    callback=_validate_json,
    help="Operation input as a JSON document (omit for no input).",
)
@_header_option
@click.option("--request-id", default=None, help="Request ID passed to the handler.")
@click.pass_obj
def start(
    app: AppContext,
    target: str,
    service_name: str,
    operation_name: str,
    input_json: str | None,
    headers: dict[str, str],
    request_id: str | None,
) -> None:
    """Start OPERATION of SERVICE and print the sync value or async token."""

    async def body(registry: ServiceRegistry) -> dict[str, Any]:
        ctx = StartOperationContext(
            service=service_name,
            operation=operation_name,
            headers=headers,
            request_id=request_id,
        )
        if input_json is None:
            payload = LazyValue(registry.serializer)
        else:
            payload = LazyValue(
                registry.serializer,
                {"content-type": JSON_CONTENT_TYPE},
                input_json.encode("utf-8"),
            )
        outcome = await registry.start(ctx, payload)
        data: dict[str, Any] = {"service": service_name, "operation": operation_name}
        if outcome.is_async:
            data.update(kind="async", token=outcome.token)
        else:
            data["kind"] = "sync"
            data.update(await _payload_fields(outcome.value))
        if ctx.outbound_links:
            data["links"] = [link.model_dump(mode="json") for link in ctx.outbound_links]
        return data

    _run(app, "start", target, body)


@click.command(
    cls=DispatchCommand,
    examples="""\
  opdispatch info myapp.services:registry orders fulfil tok-1""",
)
@_target_args
@click.argument("token")
@_header_option
@click.pass_obj
def info(
    app: AppContext,
    target: str,
    service_name: str,
    operation_name: str,
    token: str,
    headers: dict[str, str],
) -> None:
    """Show the state of the asynchronous operation identified by TOKEN."""

    async def body(registry: ServiceRegistry) -> dict[str, Any]:
        ctx = GetOperationInfoContext(
            service=service_name, operation=operation_name, headers=headers
        )
        op_info = await registry.get_info(ctx, token)
        return op_info.model_dump(mode="json")

    _run(app, "info", target, body)


@click.command(
    cls=DispatchCommand,
    examples="""\
  opdispatch result myapp.services:registry orders fulfil tok-1
  opdispatch result myapp.services:registry orders fulfil tok-1 --wait 5""",
)
@_target_args
@click.argument("token")
@click.option(
    "--wait",
    type=click.FloatRange(min=0),
    default=None,
    help="Long-poll duration in seconds, passed to the handler.",
)
@_header_option
@click.pass_obj
def result(
    app: AppContext,
    target: str,
    service_name: str,
    operation_name: str,
    token: str,
    wait: float | None,
    headers: dict[str, str],
) -> None:
    """Fetch the result of the asynchronous operation identified by TOKEN."""

    async def body(registry: ServiceRegistry) -> dict[str, Any]:
        ctx = GetOperationResultContext(
            service=service_name,
            operation=operation_name,
            headers=headers,
            wait=timedelta(seconds=wait) if wait is not None else None,
        )
        value = await registry.get_result(ctx, token)
        return {"token": token, **(await _payload_fields(value))}

    _run(app, "result", target, body)


@click.command(
    cls=DispatchCommand,
    examples="""\
  opdispatch cancel myapp.services:registry orders fulfil tok-1""",
)
@_target_args
@click.argument("token")
@_header_option
@click.pass_obj
def cancel(
    app: AppContext,
    target: str,
    service_name: str,
    operation_name: str,
    token: str,
    headers: dict[str, str],
) -> None:
    """Request cancellation of the asynchronous operation identified by TOKEN."""

    async def body(registry: ServiceRegistry) -> dict[str, Any]:
        ctx = CancelOperationContext(
            service=service_name, operation=operation_name, headers=headers
        )
        await registry.cancel(ctx, token)
        return {"token": token, "cancel_requested": True}

    _run(app, "cancel", target, body)
