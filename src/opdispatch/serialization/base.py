"""Serializer protocol and the "incompatible" marker.

A serializer that cannot handle a value or a :class:`Content` returns
:data:`INCOMPATIBLE` instead of raising. That answer means "not my format"
and lets a :class:`CompositeSerializer` try the next child. Any exception a
serializer raises is a real failure (invalid JSON, validation error...) and
stops the chain.

INVARIANT: :data:`INCOMPATIBLE` never leaves the serialization layer. The
boundary helpers (``LazyValue.consume``, ``serialize_to_lazy_value``) turn it
into :class:`SerializationError`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Protocol, TypeAlias, runtime_checkable

from opdispatch.domain.models import Content


class _Incompatible(Enum):
    INCOMPATIBLE = "incompatible"

    def __repr__(self) -> str:
        return "INCOMPATIBLE"


INCOMPATIBLE = _Incompatible.INCOMPATIBLE

Incompatible: TypeAlias = Literal[_Incompatible.INCOMPATIBLE]


@runtime_checkable
class Serializer(Protocol):
    """Converts values to and from :class:`Content`.

    ``type_hint`` is the corresponding type declared on the operation
    definition, passed through verbatim. Serializers are free to ignore it.
    """

    def serialize(self, value: Any, type_hint: Any = None) -> Content | Incompatible: ...

    def deserialize(self, content: Content, type_hint: Any = None) -> Any: ...


class SerializationError(Exception):
    """No serializer could handle a value or content."""

    def __init__(self, message: str, *, content_type: str | None = None) -> None:
        super().__init__(message)
        self.content_type = content_type
