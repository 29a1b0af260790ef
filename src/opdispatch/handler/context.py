"""Per-request operation contexts.

Contexts are passed explicitly to every dispatch, middleware, and handler
call; nothing is looked up from ambient state. The transport builds one per
request.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta

from opdispatch.domain.models import Link


@dataclass
class OperationContext:
    """Information shared by all four handler methods.

    Attributes:
        service: Name of the service that contains the operation.
        operation: Resolved name of the operation.
        headers: Request headers (keys lower-cased).
        cancellation: Set when the caller abandons the request. Handlers may
            observe it; ignoring it is allowed.
    """

    service: str
    operation: str
    headers: dict[str, str] = field(default_factory=dict)
    cancellation: asyncio.Event = field(default_factory=asyncio.Event)

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def cancelled(self) -> bool:
        return self.cancellation.is_set()


@dataclass
class StartOperationContext(OperationContext):
    """Context for ``start``.

    ``outbound_links`` is mutable: handlers append links to be returned to
    the caller on a successful start.
    """

    request_id: str | None = None
    callback_url: str | None = None
    callback_headers: dict[str, str] = field(default_factory=dict)
    inbound_links: list[Link] = field(default_factory=list)
    outbound_links: list[Link] = field(default_factory=list)


@dataclass
class GetOperationInfoContext(OperationContext):
    """Context for ``get_info``."""


@dataclass
class GetOperationResultContext(OperationContext):
    """Context for ``get_result``.

    A positive ``wait`` turns the call into a long poll. The duration is
    passed through untouched; the handler must return within it.
    """

    wait: timedelta | None = None


@dataclass
class CancelOperationContext(OperationContext):
    """Context for ``cancel``."""
