"""ServiceHandler — a service contract bound to its operation handlers.

Handlers can be supplied as a mapping keyed by operation key, or as an
object (typically a class instance) whose attributes are named after the
keys::

    class OrdersHandler:
        async def place(self, ctx, order):
            return {"id": "ord-1", **order}

        cancel_order = CancelOrderHandler()

    bound = service_handler(orders, OrdersHandler())

Binding happens once, at startup; every contract violation raises
:class:`DefinitionError` here and never at request time.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from opdispatch.domain.errors import DefinitionError
from opdispatch.handler.operation_handler import OperationHandler, as_operation_handler
from opdispatch.service.definition import (
    OperationDefinition,
    ServiceDefinition,
    validate_service_definition,
)


@dataclass(frozen=True)
class BoundOperation:
    """An operation contract together with its normalised handler."""

    key: str
    definition: OperationDefinition
    handler: OperationHandler

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def input_type(self) -> Any:
        return self.definition.input_type

    @property
    def output_type(self) -> Any:
        return self.definition.output_type


@dataclass(frozen=True)
class ServiceHandler:
    """A validated service binding, keyed by resolved operation name."""

    definition: ServiceDefinition
    operations: Mapping[str, BoundOperation] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def name(self) -> str:
        return self.definition.name

    def get_operation_handler(self, name: str) -> BoundOperation | None:
        return self.operations.get(name)


def _lookup(handlers: Any, key: str) -> Any:
    if isinstance(handlers, Mapping):
        return handlers.get(key)
    return getattr(handlers, key, None)


def service_handler(definition: ServiceDefinition, handlers: Any) -> ServiceHandler:
    """Bind *handlers* to every operation of *definition*.

    Raises:
        DefinitionError: The definition is invalid, an operation has no
            handler entry, or a handler entry has no ``start``.
    """
    validate_service_definition(definition)

    bound: dict[str, BoundOperation] = {}
    for key, op in definition.operations.items():
        candidate = _lookup(handlers, key)
        if candidate is None:
            msg = (
                f"No handler registered for operation '{op.name}' (key '{key}') "
                f"on service '{definition.name}'"
            )
            raise DefinitionError(msg)
        bound[op.name] = BoundOperation(
            key=key,
            definition=op,
            handler=as_operation_handler(candidate, key),
        )
    return ServiceHandler(definition=definition, operations=MappingProxyType(bound))
