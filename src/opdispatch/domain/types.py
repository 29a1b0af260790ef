"""Classification enums shared across the dispatch core.

Handler error types follow the nine kinds every SDK agrees on. Operation
states describe where an asynchronous operation currently stands.
"""

from __future__ import annotations

from enum import StrEnum


class HandlerErrorType(StrEnum):
    """Protocol-level failure classes for :class:`HandlerError`."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    INTERNAL = "INTERNAL"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    UNAVAILABLE = "UNAVAILABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"


RETRYABLE_ERROR_TYPES: frozenset[HandlerErrorType] = frozenset(
    {
        HandlerErrorType.RESOURCE_EXHAUSTED,
        HandlerErrorType.INTERNAL,
        HandlerErrorType.UNAVAILABLE,
        HandlerErrorType.UPSTREAM_TIMEOUT,
    }
)


class OperationState(StrEnum):
    """Current state of an operation."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


class OperationErrorState(StrEnum):
    """Terminal states an :class:`OperationError` may report."""

    FAILED = "failed"
    CANCELED = "canceled"
