"""ServiceRegistry — the root handler a transport calls into.

Routes ``(service, operation, method)`` to the bound handler through the
composed middleware chain, decoding input and encoding output with the
configured serializer.

Per request (stateless; the registry itself is never mutated after
construction, so concurrent dispatches need no locking):

1. Resolve the bound operation, or raise a NOT_FOUND :class:`HandlerError`.
2. ``start``: decode the inbound :class:`LazyValue` with the input type hint.
3. Run the composed middleware chain around the handler method.
4. ``start`` (sync result) and ``get_result``: encode the value with the
   output type hint into an outbound :class:`LazyValue`. Async tokens are
   returned unchanged.

Handler and operation errors raised anywhere in the chain propagate to the
caller unchanged. Nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from opdispatch.domain.errors import DefinitionError, HandlerError
from opdispatch.domain.results import AsyncResult, SyncResult
from opdispatch.domain.types import HandlerErrorType
from opdispatch.handler.middleware import compose_middlewares
from opdispatch.handler.operation_handler import maybe_await
from opdispatch.serialization.base import SerializationError, Serializer
from opdispatch.serialization.lazy_value import LazyValue, serialize_to_lazy_value
from opdispatch.serialization.serializers import default_serializer

if TYPE_CHECKING:
    from opdispatch.config.settings import DispatchSettings
    from opdispatch.domain.models import OperationInfo
    from opdispatch.handler.context import (
        CancelOperationContext,
        GetOperationInfoContext,
        GetOperationResultContext,
        OperationContext,
        StartOperationContext,
    )
    from opdispatch.handler.service_handler import BoundOperation, ServiceHandler
    from opdispatch.plugins.manager import PluginManager
    from opdispatch.service.definition import ServiceDefinition

logger = logging.getLogger(__name__)

# Serializers signal malformed payloads with ValueError (JSON, pydantic
# validation) and unencodable values with TypeError.
_CODEC_ERRORS = (SerializationError, ValueError, TypeError)


class ServiceRegistry:
    """Dispatches requests to a fixed set of service handlers.

    Args:
        services: Bound services (see :func:`service_handler`).
        serializer: Payload codec; defaults to the Null -> Binary -> JSON chain.
        middlewares: Interceptors, outermost first.

    Raises:
        DefinitionError: A service has no name or is registered twice.
    """

    def __init__(
        self,
        services: Iterable[ServiceHandler],
        *,
        serializer: Serializer | None = None,
        middlewares: Sequence[object] = (),
    ) -> None:
        table: dict[str, ServiceHandler] = {}
        for svc in services:
            name = svc.name
            if not name:
                msg = "Tried to register a service with no name"
                raise DefinitionError(msg)
            if name in table:
                msg = f"Duplicate registration of service '{name}'"
                raise DefinitionError(msg)
            table[name] = svc
        self._services = table
        self._serializer: Serializer = serializer or default_serializer()
        self._middlewares: tuple[object, ...] = tuple(middlewares)
        logger.debug(
            "Registry built: %d service(s), %d middleware(s)",
            len(table),
            len(self._middlewares),
        )

    @classmethod
    def from_settings(
        cls,
        services: Iterable[ServiceHandler],
        settings: DispatchSettings,
        *,
        plugin_manager: PluginManager | None = None,
        middlewares: Sequence[object] = (),
    ) -> ServiceRegistry:
        """Build a registry whose serializer and middleware come from configuration.

        The chain is: explicit *middlewares*, then plugin-provided ones, then
        the logging middleware when ``[middleware] logging`` is enabled (it
        therefore sits closest to the handler).
        """
        from opdispatch.handler.logging_middleware import LoggingMiddleware
        from opdispatch.serialization.serializers import SERIALIZER_FACTORIES

        chain: list[object] = list(middlewares)
        if plugin_manager is not None:
            chain.extend(plugin_manager.collect_middlewares())
        if settings.middleware.logging:
            chain.append(LoggingMiddleware())

        serializer = SERIALIZER_FACTORIES[settings.serializer.kind]()
        return cls(services, serializer=serializer, middlewares=chain)

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def middlewares(self) -> tuple[object, ...]:
        return self._middlewares

    @property
    def services(self) -> list[ServiceDefinition]:
        return [svc.definition for svc in self._services.values()]

    def get_service(self, name: str) -> ServiceHandler | None:
        return self._services.get(name)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def start(
        self,
        ctx: StartOperationContext,
        input: LazyValue,  # noqa: A002
    ) -> SyncResult | AsyncResult:
        """Start an operation; a sync result carries an outbound :class:`LazyValue`."""
        bound = self._resolve(ctx)
        # Byte source failures belong to the transport and propagate as-is.
        content = await input.read_content()
        try:
            value = input.decode(content, bound.input_type)
        except _CODEC_ERRORS as exc:
            raise HandlerError(
                "Unable to deserialize operation input",
                type=HandlerErrorType.BAD_REQUEST,
                cause=exc,
            ) from exc

        async def terminal(c: StartOperationContext, v: Any) -> SyncResult | AsyncResult:
            return await maybe_await(bound.handler.start(c, v))

        chain = compose_middlewares(self._middlewares, "start", terminal)
        result = await chain(ctx, value)

        if not isinstance(result, SyncResult | AsyncResult):
            raise HandlerError(
                f"Handler for operation '{bound.name}' returned {type(result).__name__}, "
                "expected SyncResult or AsyncResult",
                type=HandlerErrorType.INTERNAL,
            )
        if result.kind == "async":
            return result
        return SyncResult(value=self._encode(result.value, bound))

    async def get_info(self, ctx: GetOperationInfoContext, token: str) -> OperationInfo:
        bound = self._resolve(ctx)

        async def terminal(c: GetOperationInfoContext, t: str) -> OperationInfo:
            return await maybe_await(bound.handler.get_info(c, t))

        chain = compose_middlewares(self._middlewares, "get_info", terminal)
        return await chain(ctx, token)

    async def get_result(self, ctx: GetOperationResultContext, token: str) -> LazyValue:
        bound = self._resolve(ctx)

        async def terminal(c: GetOperationResultContext, t: str) -> Any:
            return await maybe_await(bound.handler.get_result(c, t))

        chain = compose_middlewares(self._middlewares, "get_result", terminal)
        value = await chain(ctx, token)
        return self._encode(value, bound)

    async def cancel(self, ctx: CancelOperationContext, token: str) -> None:
        bound = self._resolve(ctx)

        async def terminal(c: CancelOperationContext, t: str) -> None:
            await maybe_await(bound.handler.cancel(c, t))

        chain = compose_middlewares(self._middlewares, "cancel", terminal)
        await chain(ctx, token)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _resolve(self, ctx: OperationContext) -> BoundOperation:
        svc = self._services.get(ctx.service)
        if svc is None:
            raise HandlerError(
                f"No service handler registered for service '{ctx.service}'",
                type=HandlerErrorType.NOT_FOUND,
            )
        bound = svc.get_operation_handler(ctx.operation)
        if bound is None:
            raise HandlerError(
                f"No operation handler registered for operation '{ctx.operation}' "
                f"in service '{ctx.service}'",
                type=HandlerErrorType.NOT_FOUND,
            )
        return bound

    def _encode(self, value: Any, bound: BoundOperation) -> LazyValue:
        try:
            return serialize_to_lazy_value(self._serializer, value, bound.output_type)
        except _CODEC_ERRORS as exc:
            raise HandlerError(
                "Unable to serialize operation output",
                type=HandlerErrorType.INTERNAL,
                cause=exc,
            ) from exc
