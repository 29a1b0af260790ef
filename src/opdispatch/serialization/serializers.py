"""Built-in serializers and the composite that chains them.

Default chain (encode order): Null -> Binary -> JSON. Decoding walks the
same chain in reverse, so JSON content is recognised first and the Null
serializer only claims payloads nothing else wanted.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import to_json

from opdispatch.domain.models import Content
from opdispatch.serialization.base import INCOMPATIBLE, Incompatible, Serializer

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"


def _media_type(content: Content) -> str | None:
    """Content type without parameters (``application/json; charset=utf-8`` -> ``application/json``)."""
    raw = content.content_type
    if raw is None:
        return None
    return raw.split(";", 1)[0].strip().lower()


class CompositeSerializer:
    """Chains serializers with fallback on :data:`INCOMPATIBLE`.

    ``serialize`` tries children in registration order; ``deserialize`` tries
    them in reverse. The first answer other than :data:`INCOMPATIBLE` wins.
    Exceptions from a child propagate immediately. When every child declines,
    the composite itself answers :data:`INCOMPATIBLE`.
    """

    def __init__(self, serializers: Sequence[Serializer]) -> None:
        self._serializers: tuple[Serializer, ...] = tuple(serializers)

    @property
    def serializers(self) -> tuple[Serializer, ...]:
        return self._serializers

    def serialize(self, value: Any, type_hint: Any = None) -> Content | Incompatible:
        for serializer in self._serializers:
            content = serializer.serialize(value, type_hint)
            if content is not INCOMPATIBLE:
                return content
        logger.debug("No serializer accepted value of type %s", type(value).__name__)
        return INCOMPATIBLE

    def deserialize(self, content: Content, type_hint: Any = None) -> Any:
        for serializer in reversed(self._serializers):
            value = serializer.deserialize(content, type_hint)
            if value is not INCOMPATIBLE:
                return value
        logger.debug("No serializer accepted content type %r", content.content_type)
        return INCOMPATIBLE


class NullSerializer:
    """``None`` <-> empty content.

    Not bijective: any content without data decodes to ``None``, whatever
    its headers say.
    """

    def serialize(self, value: Any, type_hint: Any = None) -> Content | Incompatible:
        if value is None:
            return Content(headers={}, data=None)
        return INCOMPATIBLE

    def deserialize(self, content: Content, type_hint: Any = None) -> Any:
        if content.data is None:
            return None
        return INCOMPATIBLE


class BinarySerializer:
    """Raw bytes <-> ``application/octet-stream``."""

    def serialize(self, value: Any, type_hint: Any = None) -> Content | Incompatible:
        if isinstance(value, bytes | bytearray | memoryview):
            return Content(headers={"content-type": BINARY_CONTENT_TYPE}, data=bytes(value))
        return INCOMPATIBLE

    def deserialize(self, content: Content, type_hint: Any = None) -> Any:
        if _media_type(content) == BINARY_CONTENT_TYPE and content.data is not None:
            return content.data
        return INCOMPATIBLE


class JsonSerializer:
    """Anything ``json`` can encode <-> ``application/json`` (UTF-8).

    Ignores type hints. A value ``json`` cannot encode raises ``TypeError``;
    NaN and infinities raise ``ValueError``. Both are encoding failures, not
    a format mismatch.
    """

    def serialize(self, value: Any, type_hint: Any = None) -> Content | Incompatible:
        encoded = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        return Content(headers={"content-type": JSON_CONTENT_TYPE}, data=encoded.encode("utf-8"))

    def deserialize(self, content: Content, type_hint: Any = None) -> Any:
        if _media_type(content) == JSON_CONTENT_TYPE and content.data is not None:
            return json.loads(content.data.decode("utf-8"))
        return INCOMPATIBLE


@functools.lru_cache(maxsize=256)
def _cached_adapter(type_hint: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_hint)


def _adapter(type_hint: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(type_hint)
    except TypeError:
        # Unhashable hint; build without caching.
        return TypeAdapter(type_hint)


class PydanticSerializer:
    """JSON codec that honours operation type hints through pydantic.

    With a type hint, decoding validates into that type (a ``BaseModel``,
    ``list[int]``, a dataclass...) and encoding dumps through the same
    adapter. Without one it behaves like :class:`JsonSerializer`, except that
    pydantic models, dataclasses, and datetimes encode natively.
    Validation errors propagate unchanged.
    """

    def serialize(self, value: Any, type_hint: Any = None) -> Content | Incompatible:
        if type_hint is not None:
            data = _adapter(type_hint).dump_json(value)
        else:
            data = to_json(value)
        return Content(headers={"content-type": JSON_CONTENT_TYPE}, data=data)

    def deserialize(self, content: Content, type_hint: Any = None) -> Any:
        if _media_type(content) != JSON_CONTENT_TYPE or content.data is None:
            return INCOMPATIBLE
        if type_hint is not None:
            return _adapter(type_hint).validate_json(content.data)
        return json.loads(content.data.decode("utf-8"))


def default_serializer() -> CompositeSerializer:
    """The Null -> Binary -> JSON composite used when none is configured."""
    return CompositeSerializer([NullSerializer(), BinarySerializer(), JsonSerializer()])


def pydantic_serializer() -> CompositeSerializer:
    """The Null -> Binary -> Pydantic composite (type-hint aware)."""
    return CompositeSerializer([NullSerializer(), BinarySerializer(), PydanticSerializer()])


SERIALIZER_FACTORIES = {
    "default": default_serializer,
    "pydantic": pydantic_serializer,
}
