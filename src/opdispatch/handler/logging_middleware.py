"""LoggingMiddleware — one structured log event per dispatched call.

Emits ``dispatch.complete`` at DEBUG on success and ``dispatch.failed`` at
WARNING when the chain raises. Failures outside the dispatch error families
carry their traceback. Errors are re-raised unchanged.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog

from opdispatch.domain.errors import DispatchError, HandlerError, OperationError
from opdispatch.handler.middleware import Next, OperationMiddleware

if TYPE_CHECKING:
    from opdispatch.domain.models import OperationInfo
    from opdispatch.domain.results import AsyncResult, SyncResult
    from opdispatch.handler.context import (
        CancelOperationContext,
        GetOperationInfoContext,
        GetOperationResultContext,
        OperationContext,
        StartOperationContext,
    )


def _error_fields(exc: BaseException) -> dict[str, Any]:
    if isinstance(exc, HandlerError):
        return {
            "error_kind": exc.kind,
            "error_type": str(exc.type),
            "retryable": exc.retryable,
        }
    if isinstance(exc, OperationError):
        return {"error_kind": exc.kind, "operation_state": exc.state.value}
    return {"error_kind": "unclassified", "error_type": type(exc).__name__}


class LoggingMiddleware(OperationMiddleware):
    """Logs method, service, operation, and duration of every call."""

    def __init__(self, logger_name: str = "opdispatch.dispatch") -> None:
        self._log = structlog.get_logger(logger_name)

    async def _observe(self, method: str, ctx: OperationContext, arg: Any, next: Next) -> Any:  # noqa: A002
        log = self._log.bind(method=method, service=ctx.service, operation=ctx.operation)
        started = time.perf_counter()
        try:
            result = await next(ctx, arg)
        except Exception as exc:
            log.warning(
                "dispatch.failed",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                error=str(exc),
                **_error_fields(exc),
                exc_info=not isinstance(exc, DispatchError),
            )
            raise
        log.debug(
            "dispatch.complete",
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result

    async def start(
        self,
        ctx: StartOperationContext,
        input: Any,  # noqa: A002
        next: Next,  # noqa: A002
    ) -> SyncResult | AsyncResult:
        return await self._observe("start", ctx, input, next)

    async def get_info(
        self,
        ctx: GetOperationInfoContext,
        token: str,
        next: Next,  # noqa: A002
    ) -> OperationInfo:
        return await self._observe("get_info", ctx, token, next)

    async def get_result(
        self,
        ctx: GetOperationResultContext,
        token: str,
        next: Next,  # noqa: A002
    ) -> Any:
        return await self._observe("get_result", ctx, token, next)

    async def cancel(
        self,
        ctx: CancelOperationContext,
        token: str,
        next: Next,  # noqa: A002
    ) -> None:
        await self._observe("cancel", ctx, token, next)
