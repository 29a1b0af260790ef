"""StartOperationResult — the sync-value / async-token union returned by ``start``.

INVARIANT: exactly one variant is populated and ``kind`` decides which. Code
branching on a result reads ``result.kind`` (or ``is_async``), never the
presence of ``value`` or ``token``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SyncResult(BaseModel):
    """The operation completed inline with ``value``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["sync"] = "sync"
    value: Any = None

    @property
    def is_async(self) -> bool:
        return False


class AsyncResult(BaseModel):
    """The operation was accepted and will complete later; poll with ``token``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["async"] = "async"
    token: str = Field(min_length=1)

    @property
    def is_async(self) -> bool:
        return True


StartOperationResultType = Annotated[SyncResult | AsyncResult, Field(discriminator="kind")]

START_RESULT_ADAPTER: TypeAdapter[SyncResult | AsyncResult] = TypeAdapter(
    StartOperationResultType
)


class StartOperationResult:
    """Factory namespace for the two result variants.

    Usage::

        return StartOperationResult.sync(order)
        return StartOperationResult.async_("tok-1")
    """

    @staticmethod
    def sync(value: Any) -> SyncResult:
        return SyncResult(value=value)

    @staticmethod
    def async_(token: str) -> AsyncResult:
        return AsyncResult(token=token)

    @staticmethod
    def parse(data: Any) -> SyncResult | AsyncResult:
        """Validate a mapping into the variant named by its ``kind`` key."""
        return START_RESULT_ADAPTER.validate_python(data)
