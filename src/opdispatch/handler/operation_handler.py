"""Operation handlers — the four-method capability bound to one operation.

Two shapes are accepted when binding a service:

- a full handler: any object with a callable ``start`` (usually a subclass
  of :class:`OperationHandler`). Missing ``get_info`` / ``get_result`` /
  ``cancel`` methods fall back to NOT_IMPLEMENTED stubs.
- a start-only callable ``fn(ctx, input) -> output``, wrapped in
  :class:`StartOnlyHandler`.

:func:`as_operation_handler` normalises both into the full capability set.
Handler methods may be coroutines or plain functions.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from opdispatch.domain.errors import DefinitionError, HandlerError
from opdispatch.domain.results import AsyncResult, SyncResult
from opdispatch.domain.types import HandlerErrorType

if TYPE_CHECKING:
    from opdispatch.domain.models import OperationInfo
    from opdispatch.handler.context import (
        CancelOperationContext,
        GetOperationInfoContext,
        GetOperationResultContext,
        StartOperationContext,
    )

StartFunction: TypeAlias = "Callable[[StartOperationContext, Any], Awaitable[Any] | Any]"

HANDLER_METHODS: tuple[str, ...] = ("start", "get_info", "get_result", "cancel")


async def maybe_await(result: Any) -> Any:
    """Await *result* if it is awaitable, else return it as is."""
    if inspect.isawaitable(result):
        return await result
    return result


def _not_implemented() -> HandlerError:
    return HandlerError("Not implemented", type=HandlerErrorType.NOT_IMPLEMENTED)


class OperationHandler:
    """Base class for operation handlers.

    Subclasses must implement :meth:`start`. The other three default to
    raising a NOT_IMPLEMENTED :class:`HandlerError`, which is right for
    operations that always complete synchronously.

    ``cancel`` must tolerate duplicate calls for the same token: cancellation
    only guarantees that the intent was delivered.
    """

    async def start(self, ctx: StartOperationContext, input: Any) -> SyncResult | AsyncResult:  # noqa: A002
        raise _not_implemented()

    async def get_info(self, ctx: GetOperationInfoContext, token: str) -> OperationInfo:
        raise _not_implemented()

    async def get_result(self, ctx: GetOperationResultContext, token: str) -> Any:
        raise _not_implemented()

    async def cancel(self, ctx: CancelOperationContext, token: str) -> None:
        raise _not_implemented()


class StartOnlyHandler(OperationHandler):
    """Adapts a bare start function; every result is synchronous."""

    def __init__(self, fn: StartFunction) -> None:
        self._fn = fn

    @property
    def fn(self) -> StartFunction:
        return self._fn

    async def start(self, ctx: StartOperationContext, input: Any) -> SyncResult:  # noqa: A002
        value = await maybe_await(self._fn(ctx, input))
        return SyncResult(value=value)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__qualname__", repr(self._fn))
        return f"StartOnlyHandler({name})"


class _ObjectHandler(OperationHandler):
    """Adapts an arbitrary object exposing some subset of the handler methods."""

    def __init__(self, target: Any) -> None:
        self._target = target

    async def start(self, ctx: StartOperationContext, input: Any) -> SyncResult | AsyncResult:  # noqa: A002
        return await maybe_await(self._target.start(ctx, input))

    async def get_info(self, ctx: GetOperationInfoContext, token: str) -> OperationInfo:
        method = getattr(self._target, "get_info", None)
        if method is None:
            raise _not_implemented()
        return await maybe_await(method(ctx, token))

    async def get_result(self, ctx: GetOperationResultContext, token: str) -> Any:
        method = getattr(self._target, "get_result", None)
        if method is None:
            raise _not_implemented()
        return await maybe_await(method(ctx, token))

    async def cancel(self, ctx: CancelOperationContext, token: str) -> None:
        method = getattr(self._target, "cancel", None)
        if method is None:
            raise _not_implemented()
        await maybe_await(method(ctx, token))

    def __repr__(self) -> str:
        return f"_ObjectHandler({self._target!r})"


def as_operation_handler(candidate: Any, key: str) -> OperationHandler:
    """Normalise *candidate* into an :class:`OperationHandler`.

    Raises:
        DefinitionError: *candidate* is neither callable nor has a callable
            ``start`` method.
    """
    if isinstance(candidate, OperationHandler):
        if type(candidate).start is OperationHandler.start:
            msg = f"Handler for operation '{key}' has no start method"
            raise DefinitionError(msg)
        return candidate
    start = getattr(candidate, "start", None)
    if callable(start):
        return _ObjectHandler(candidate)
    if callable(candidate) and not isinstance(candidate, type):
        return StartOnlyHandler(candidate)
    msg = f"Handler for operation '{key}' has no start method"
    raise DefinitionError(msg)
