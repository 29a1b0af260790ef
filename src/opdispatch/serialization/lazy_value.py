"""LazyValue — a payload that is only decoded when consumed.

The transport hands the dispatch core a LazyValue for inbound input; the core
hands one back for outbound output. The LazyValue owns its byte source; the
serializer is a shared, stateless collaborator.

INVARIANT: a stream source is pulled at most once. Chunks are joined in
order into one buffer before the serializer sees them.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Mapping
from typing import Any, TypeAlias

from opdispatch.domain.models import Content
from opdispatch.serialization.base import INCOMPATIBLE, SerializationError, Serializer

ByteSource: TypeAlias = bytes | Iterable[bytes] | AsyncIterable[bytes]


class LazyValue:
    """A header map plus a not-yet-materialised byte source, bound to a serializer.

    Args:
        serializer: Decodes the materialised :class:`Content`.
        headers: Content headers; keys are lower-cased.
        source: ``None`` for an empty body, ``bytes`` for an in-memory
            buffer, or a one-shot sync/async iterable of byte chunks.
    """

    def __init__(
        self,
        serializer: Serializer,
        headers: Mapping[str, str] | None = None,
        source: ByteSource | None = None,
    ) -> None:
        self.serializer = serializer
        self.headers: dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        self._source = source
        self._consumed = False

    @classmethod
    def from_content(cls, serializer: Serializer, content: Content) -> LazyValue:
        """Wrap already-serialized content (the outbound direction)."""
        return cls(serializer, content.headers, content.data)

    @property
    def consumed(self) -> bool:
        """Whether a stream source has already been pulled."""
        return self._consumed

    async def read_content(self) -> Content:
        """Materialise the source into :class:`Content` without decoding it.

        Raises:
            RuntimeError: The stream source was already consumed.
        """
        source = self._source
        if source is None:
            return Content(headers=self.headers)
        if isinstance(source, bytes | bytearray | memoryview):
            return Content(headers=self.headers, data=bytes(source))

        if self._consumed:
            msg = "LazyValue stream has already been consumed"
            raise RuntimeError(msg)
        self._consumed = True

        chunks: list[bytes] = []
        if isinstance(source, AsyncIterable):
            async for chunk in source:
                chunks.append(bytes(chunk))
        else:
            for chunk in source:
                chunks.append(bytes(chunk))
        return Content(headers=self.headers, data=b"".join(chunks))

    async def consume(self, type_hint: Any = None) -> Any:
        """Materialise and decode the payload.

        With no source the serializer receives header-only content, which
        lets it produce a default (``None`` for the default chain). Errors
        raised by the byte source propagate unchanged.

        Raises:
            SerializationError: The serializer reported the content as
                incompatible.
        """
        return self.decode(await self.read_content(), type_hint)

    def decode(self, content: Content, type_hint: Any = None) -> Any:
        """Decode already-materialised *content* with this value's serializer.

        Raises:
            SerializationError: The serializer reported the content as
                incompatible.
        """
        value = self.serializer.deserialize(content, type_hint)
        if value is INCOMPATIBLE:
            msg = f"No serializer could decode content of type {content.content_type!r}"
            raise SerializationError(msg, content_type=content.content_type)
        return value

    def __repr__(self) -> str:
        return f"LazyValue(headers={self.headers!r}, consumed={self._consumed})"


def serialize_to_lazy_value(serializer: Serializer, value: Any, type_hint: Any = None) -> LazyValue:
    """Serialize *value* and wrap the result as an outbound :class:`LazyValue`.

    Raises:
        SerializationError: The serializer reported the value as incompatible.
    """
    content = serializer.serialize(value, type_hint)
    if content is INCOMPATIBLE:
        msg = f"No serializer could encode value of type {type(value).__name__}"
        raise SerializationError(msg)
    return LazyValue.from_content(serializer, content)
