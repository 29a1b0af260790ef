"""Error taxonomy for the dispatch boundary.

Two independent families cross the boundary:

- :class:`HandlerError` classifies protocol-facing failures (bad input,
  missing service, overload...). Each type carries a default retryability
  that an explicit override always beats.
- :class:`OperationError` reports the business outcome of an operation that
  did not succeed, either ``failed`` or ``canceled``, and always wraps the
  underlying cause.

Both expose a ``kind`` discriminator so callers can match structurally
(``err.kind == "handler"``) instead of relying on class identity.

:class:`DefinitionError` is raised at construction time for contract
violations (empty names, duplicates, missing handlers). It never reaches a
request.
"""

from __future__ import annotations

from typing import ClassVar

from opdispatch.domain.types import (
    RETRYABLE_ERROR_TYPES,
    HandlerErrorType,
    OperationErrorState,
)


class DefinitionError(ValueError):
    """A service, operation, or registry definition is invalid."""


class DispatchError(Exception):
    """Base class for errors surfaced to the caller of a dispatch method."""

    kind: ClassVar[str] = "dispatch"


class HandlerError(DispatchError):
    """A protocol-classified failure of the handling infrastructure.

    Usage::

        raise HandlerError("Invalid input provided", type=HandlerErrorType.BAD_REQUEST)
        raise HandlerError(type="INTERNAL", cause=exc, retryable_override=False)

    Attributes:
        type: One of :class:`HandlerErrorType`, or the raw string when the
            caller supplied a type this SDK does not recognise.
        cause: The underlying exception, if any.
        retryable_override: Explicit retry decision, ``None`` to derive it
            from ``type``.
    """

    kind: ClassVar[str] = "handler"

    def __init__(
        self,
        message: str | None = None,
        *,
        type: HandlerErrorType | str,  # noqa: A002
        cause: BaseException | None = None,
        retryable_override: bool | None = None,
    ) -> None:
        resolved = message or (str(cause) if cause is not None else "") or "Handler error"
        super().__init__(resolved)
        self.message = resolved
        self.type: HandlerErrorType | str = _coerce_error_type(type)
        self.cause = cause
        self.retryable_override = retryable_override
        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the request.

        Unrecognised types are retryable, in line with the other SDKs.
        """
        if self.retryable_override is not None:
            return self.retryable_override
        if not isinstance(self.type, HandlerErrorType):
            return True
        return self.type in RETRYABLE_ERROR_TYPES

    def __repr__(self) -> str:
        return (
            f"HandlerError(type={str(self.type)!r}, message={self.message!r}, "
            f"retryable={self.retryable})"
        )


class OperationError(DispatchError):
    """A failed or canceled operation outcome.

    The message is the cause's message when it has one, otherwise
    ``"Operation failed"`` / ``"Operation canceled"``.

    Raises:
        ValueError: *state* is not ``failed`` or ``canceled``.
        TypeError: *cause* is missing or not an exception.
    """

    kind: ClassVar[str] = "operation"

    def __init__(self, state: OperationErrorState | str, cause: BaseException) -> None:
        try:
            resolved_state = OperationErrorState(state)
        except ValueError:
            msg = f"Invalid operation error state: {state!r}"
            raise ValueError(msg) from None
        if not isinstance(cause, BaseException):
            msg = "OperationError requires an exception as its cause"
            raise TypeError(msg)

        message = str(cause) or _default_operation_message(resolved_state)
        super().__init__(message)
        self.message = message
        self.state = resolved_state
        self.cause = cause
        self.__cause__ = cause

    @classmethod
    def failed(cls, cause: BaseException) -> OperationError:
        return cls(OperationErrorState.FAILED, cause)

    @classmethod
    def canceled(cls, cause: BaseException) -> OperationError:
        return cls(OperationErrorState.CANCELED, cause)

    def __repr__(self) -> str:
        return f"OperationError(state={self.state.value!r}, message={self.message!r})"


class OperationStillRunningError(Exception):
    """Raised by ``get_result`` when the asynchronous operation has not finished."""

    def __init__(self) -> None:
        super().__init__("Operation still running")


def _coerce_error_type(value: HandlerErrorType | str) -> HandlerErrorType | str:
    try:
        return HandlerErrorType(value)
    except ValueError:
        return value


def _default_operation_message(state: OperationErrorState) -> str:
    if state is OperationErrorState.CANCELED:
        return "Operation canceled"
    return "Operation failed"
