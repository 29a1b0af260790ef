"""opdispatch — operation dispatch core for RPC-style services.

Declare a service contract, bind handlers to it, and route calls through a
:class:`ServiceRegistry` with pluggable serialization and middleware.
"""

__version__ = "0.1.0"

from opdispatch.domain.errors import (  # noqa: E402
    DefinitionError,
    DispatchError,
    HandlerError,
    OperationError,
    OperationStillRunningError,
)
from opdispatch.domain.models import Content, Link, OperationInfo  # noqa: E402
from opdispatch.domain.results import (  # noqa: E402
    AsyncResult,
    StartOperationResult,
    SyncResult,
)
from opdispatch.domain.types import (  # noqa: E402
    HandlerErrorType,
    OperationErrorState,
    OperationState,
)
from opdispatch.handler import (  # noqa: E402
    CancelOperationContext,
    GetOperationInfoContext,
    GetOperationResultContext,
    LoggingMiddleware,
    OperationContext,
    OperationHandler,
    OperationMiddleware,
    ServiceHandler,
    ServiceRegistry,
    StartOperationContext,
    service_handler,
)
from opdispatch.serialization import (  # noqa: E402
    INCOMPATIBLE,
    LazyValue,
    SerializationError,
    Serializer,
    default_serializer,
)
from opdispatch.service import ServiceDefinition, operation, service  # noqa: E402

__all__ = [
    "INCOMPATIBLE",
    "AsyncResult",
    "CancelOperationContext",
    "Content",
    "DefinitionError",
    "DispatchError",
    "GetOperationInfoContext",
    "GetOperationResultContext",
    "HandlerError",
    "HandlerErrorType",
    "LazyValue",
    "Link",
    "LoggingMiddleware",
    "OperationContext",
    "OperationError",
    "OperationErrorState",
    "OperationHandler",
    "OperationInfo",
    "OperationMiddleware",
    "OperationState",
    "SerializationError",
    "Serializer",
    "ServiceDefinition",
    "ServiceHandler",
    "ServiceRegistry",
    "StartOperationContext",
    "StartOperationResult",
    "SyncResult",
    "__version__",
    "default_serializer",
    "operation",
    "service",
    "service_handler",
]
