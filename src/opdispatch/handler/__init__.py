"""Handler layer — operation handlers, middleware, service binding, registry.

The handler layer may import from domain, service, and serialization.
It must never import from commands or output.
"""

from opdispatch.handler.context import (
    CancelOperationContext,
    GetOperationInfoContext,
    GetOperationResultContext,
    OperationContext,
    StartOperationContext,
)
from opdispatch.handler.logging_middleware import LoggingMiddleware
from opdispatch.handler.middleware import OperationMiddleware, compose_middlewares
from opdispatch.handler.operation_handler import (
    OperationHandler,
    StartOnlyHandler,
    as_operation_handler,
)
from opdispatch.handler.registry import ServiceRegistry
from opdispatch.handler.service_handler import BoundOperation, ServiceHandler, service_handler

__all__ = [
    "BoundOperation",
    "CancelOperationContext",
    "GetOperationInfoContext",
    "GetOperationResultContext",
    "LoggingMiddleware",
    "OperationContext",
    "OperationHandler",
    "OperationMiddleware",
    "ServiceHandler",
    "ServiceRegistry",
    "StartOnlyHandler",
    "StartOperationContext",
    "as_operation_handler",
    "compose_middlewares",
    "service_handler",
]
