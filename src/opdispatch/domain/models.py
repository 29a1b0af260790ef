"""Wire-neutral value models: Content, Link, OperationInfo.

These depend only on pydantic. They never import from handler,
serialization, or config.
"""

from __future__ import annotations

from typing import Any

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, field_validator

from opdispatch.domain.types import OperationState


class Content(BaseModel):
    """A header map plus an optional byte payload.

    Header keys are lower-cased on construction. ``data=None`` means "no
    content" and is distinct from an empty payload (``b""``).
    """

    model_config = ConfigDict(frozen=True)

    headers: dict[str, str] = Field(default_factory=dict)
    data: bytes | None = None

    @field_validator("headers", mode="before")
    @classmethod
    def _lower_header_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k).lower(): v for k, v in value.items()}
        return value

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")


class Link(BaseModel):
    """A typed URL passed between caller and handler."""

    model_config = ConfigDict(frozen=True)

    url: AnyUrl
    type: str = Field(pattern=r"^[A-Za-z0-9_./]+$")


class OperationInfo(BaseModel):
    """Information about an asynchronous operation, returned by ``get_info``."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1)
    state: OperationState
