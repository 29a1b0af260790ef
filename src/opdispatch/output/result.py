"""InvocationResult and InvocationError — what every CLI command emits.

INVARIANT: Commands never print directly. They build an InvocationResult
and hand it to ``AppContext.emit``, which picks human or JSON rendering.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from opdispatch.domain.errors import HandlerError, OperationError, OperationStillRunningError


class InvocationError(BaseModel):
    """Structured error payload within an InvocationResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class InvocationResult(BaseModel):
    """Outcome of one CLI command.

    Attributes:
        ok: Whether the command succeeded.
        op: Name of the command (e.g. ``"start"``).
        data: Command-specific payload on success.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    error: InvocationError | None = None

    @classmethod
    def success(cls, op: str, data: dict[str, Any] | None = None) -> InvocationResult:
        return cls(ok=True, op=op, data=data or {})

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> InvocationResult:
        return cls(
            ok=False,
            op=op,
            error=InvocationError(code=code, message=message, detail=detail or {}),
        )

    @classmethod
    def from_exception(cls, op: str, exc: Exception) -> InvocationResult:
        """Map a dispatch error onto an error result.

        Handler errors use their type as the code, operation errors use their
        state. A still-running result is ``STILL_RUNNING``; anything else is
        reported as ``ERROR``.
        """
        if isinstance(exc, HandlerError):
            return cls.failure(
                op,
                str(exc.type),
                exc.message,
                {"kind": exc.kind, "retryable": exc.retryable},
            )
        if isinstance(exc, OperationError):
            return cls.failure(
                op,
                exc.state.value.upper(),
                exc.message,
                {"kind": exc.kind, "state": exc.state.value},
            )
        if isinstance(exc, OperationStillRunningError):
            return cls.failure(op, "STILL_RUNNING", str(exc))
        return cls.failure(op, "ERROR", str(exc) or type(exc).__name__)
