"""Serialization layer — serializers, composite chaining, lazy payloads."""

from opdispatch.serialization.base import (
    INCOMPATIBLE,
    Incompatible,
    SerializationError,
    Serializer,
)
from opdispatch.serialization.lazy_value import LazyValue, serialize_to_lazy_value
from opdispatch.serialization.serializers import (
    BinarySerializer,
    CompositeSerializer,
    JsonSerializer,
    NullSerializer,
    PydanticSerializer,
    default_serializer,
    pydantic_serializer,
)

__all__ = [
    "INCOMPATIBLE",
    "BinarySerializer",
    "CompositeSerializer",
    "Incompatible",
    "JsonSerializer",
    "LazyValue",
    "NullSerializer",
    "PydanticSerializer",
    "SerializationError",
    "Serializer",
    "default_serializer",
    "pydantic_serializer",
    "serialize_to_lazy_value",
]
