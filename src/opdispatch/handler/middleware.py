"""Middleware — ordered interceptors around the four handler methods.

A middleware is any object implementing some subset of::

    async def start(self, ctx, input, next) -> SyncResult | AsyncResult
    async def get_info(self, ctx, token, next) -> OperationInfo
    async def get_result(self, ctx, token, next) -> Any
    async def cancel(self, ctx, token, next) -> None

``next(ctx, input_or_token)`` continues the chain. A middleware may inspect
or replace arguments and results, or raise to reject the request early; it
must otherwise await and return ``next``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeAlias

from opdispatch.handler.operation_handler import HANDLER_METHODS, maybe_await

Next: TypeAlias = Callable[[Any, Any], Awaitable[Any]]


class OperationMiddleware:
    """Marker base class for middleware.

    Defines no interceptors itself: a method a subclass does not implement
    is skipped when the chain is composed, so there is no pass-through cost.
    """


def _link(interceptor: Callable[..., Any], next_: Next) -> Next:
    async def call(ctx: Any, arg: Any) -> Any:
        return await maybe_await(interceptor(ctx, arg, next_))

    return call


def compose_middlewares(
    middlewares: Sequence[object],
    method: str,
    terminal: Next,
) -> Next:
    """Compose *middlewares* around *terminal* for one handler method.

    The list is folded from last to first, so ``middlewares[0]`` is the
    outermost: first to see the call, last to see the result. Middlewares
    lacking *method* are skipped entirely.

    Raises:
        ValueError: *method* is not one of the four handler methods.
    """
    if method not in HANDLER_METHODS:
        msg = f"Unknown handler method {method!r}"
        raise ValueError(msg)

    composed = terminal
    for middleware in reversed(middlewares):
        interceptor = getattr(middleware, method, None)
        if interceptor is None:
            continue
        composed = _link(interceptor, composed)
    return composed
