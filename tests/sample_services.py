"""Sample services used by the registry and CLI tests.

Importable as ``tests.sample_services`` so CLI tests can pass targets like
``tests.sample_services:registry``.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

from pydantic import BaseModel

from opdispatch.domain.errors import (
    HandlerError,
    OperationError,
    OperationStillRunningError,
)
from opdispatch.domain.models import OperationInfo
from opdispatch.domain.results import AsyncResult, StartOperationResult
from opdispatch.domain.types import HandlerErrorType, OperationState
from opdispatch.handler.context import (
    CancelOperationContext,
    GetOperationInfoContext,
    GetOperationResultContext,
    StartOperationContext,
)
from opdispatch.handler.operation_handler import OperationHandler
from opdispatch.handler.registry import ServiceRegistry
from opdispatch.handler.service_handler import service_handler
from opdispatch.service.definition import operation, service


class PlaceOrder(BaseModel):
    sku: str
    quantity: int = 1


# --- echo -----------------------------------------------------------------

echo_service = service(
    "echo",
    {
        "echo": operation(),
        "blob": operation(),
        "nothing": operation(),
        "reject": operation(),
        "headers": operation(),
    },
)


async def _echo(ctx: StartOperationContext, value: Any) -> Any:
    return value


def _blob(ctx: StartOperationContext, value: Any) -> bytes:
    return b"\x00\x01binary"


def _nothing(ctx: StartOperationContext, value: Any) -> None:
    return None


def _reject(ctx: StartOperationContext, value: Any) -> Any:
    raise HandlerError("Quota exceeded", type=HandlerErrorType.RESOURCE_EXHAUSTED)


def _headers(ctx: StartOperationContext, value: Any) -> dict[str, str]:
    return dict(ctx.headers)


echo_handler = service_handler(
    echo_service,
    {
        "echo": _echo,
        "blob": _blob,
        "nothing": _nothing,
        "reject": _reject,
        "headers": _headers,
    },
)


# --- orders ---------------------------------------------------------------

orders_service = service(
    "orders",
    {
        "place": operation(input_type=PlaceOrder, output_type=dict),
        "fulfil": operation(),
        "cancel_order": operation(name="cancel-order"),
    },
)


class FulfilHandler(OperationHandler):
    """Asynchronous operation with a fixed set of tokens.

    ``tok-1`` is running, ``tok-done`` succeeded, ``tok-failed`` failed.
    Polling a running token with ``wait`` blocks until the wait elapses or
    the request is cancelled.
    """

    def __init__(self) -> None:
        self.canceled: list[str] = []

    async def start(self, ctx: StartOperationContext, input: Any) -> AsyncResult:  # noqa: A002
        return StartOperationResult.async_("tok-1")

    async def get_info(self, ctx: GetOperationInfoContext, token: str) -> OperationInfo:
        states = {
            "tok-1": OperationState.RUNNING,
            "tok-done": OperationState.SUCCEEDED,
            "tok-failed": OperationState.FAILED,
        }
        if token not in states:
            raise HandlerError(f"Unknown token '{token}'", type=HandlerErrorType.NOT_FOUND)
        return OperationInfo(token=token, state=states[token])

    async def get_result(self, ctx: GetOperationResultContext, token: str) -> Any:
        if token == "tok-done":
            return {"shipped": True}
        if token == "tok-failed":
            raise OperationError.failed(RuntimeError("card declined"))
        if ctx.wait and not ctx.cancelled:
            # Long poll until the window closes or the caller goes away.
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(ctx.cancellation.wait(), ctx.wait.total_seconds())
        raise OperationStillRunningError()

    async def cancel(self, ctx: CancelOperationContext, token: str) -> None:
        self.canceled.append(token)


class OrdersHandler:
    """Object-style handler set: attributes are named after operation keys."""

    def __init__(self) -> None:
        self.fulfil = FulfilHandler()

    def place(self, ctx: StartOperationContext, order: PlaceOrder | dict[str, Any]) -> dict[str, Any]:
        # The default JSON chain ignores type hints and hands over a dict.
        if isinstance(order, dict):
            order = PlaceOrder.model_validate(order)
        return {"id": "ord-1", "sku": order.sku, "quantity": order.quantity}

    async def cancel_order(self, ctx: StartOperationContext, value: Any) -> dict[str, Any]:
        return {"canceled": True}


orders = OrdersHandler()
orders_handler = service_handler(orders_service, orders)


# --- CLI targets ----------------------------------------------------------

registry = ServiceRegistry([echo_handler, orders_handler])
handlers = [echo_handler, orders_handler]
not_services = 42
duplicated = [echo_handler, echo_handler]
