"""Service and operation contracts.

A contract is purely declarative: a service name plus a mapping of operation
keys to :class:`OperationDefinition`. Type hints ride along untouched and are
handed to the serializer at dispatch time.

Contracts are built once through :func:`service`, which resolves each
operation's effective name (explicit ``name`` or else its mapping key) and
rejects collisions. The resulting :class:`ServiceDefinition` is immutable.

Usage::

    orders = service(
        "orders",
        {
            "place": operation(input_type=PlaceOrder, output_type=Order),
            "cancel_order": operation(name="cancel-order"),
        },
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from opdispatch.domain.errors import DefinitionError


@dataclass(frozen=True)
class PartialOperation:
    """An operation declared inside :func:`service`, name not yet resolved."""

    name: str | None = None
    input_type: Any = None
    output_type: Any = None


@dataclass(frozen=True)
class OperationDefinition:
    """A fully resolved operation contract."""

    name: str
    input_type: Any = None
    output_type: Any = None


@dataclass(frozen=True)
class ServiceDefinition:
    """A named, immutable collection of operation contracts keyed by declaration key."""

    name: str
    operations: Mapping[str, OperationDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get_operation(self, name: str) -> OperationDefinition | None:
        """Look an operation up by its resolved name (not its key)."""
        for op in self.operations.values():
            if op.name == name:
                return op
        return None

    def operation_names(self) -> list[str]:
        return [op.name for op in self.operations.values()]


def operation(
    name: str | None = None,
    *,
    input_type: Any = None,
    output_type: Any = None,
) -> PartialOperation:
    """Declare an operation. Never fails; validation happens in :func:`service`."""
    return PartialOperation(name=name, input_type=input_type, output_type=output_type)


def service(
    name: str,
    operations: Mapping[str, PartialOperation | OperationDefinition],
) -> ServiceDefinition:
    """Build a validated, immutable service contract.

    Raises:
        DefinitionError: *name* is empty, or two entries resolve to the same
            operation name.
    """
    if not isinstance(name, str) or not name:
        msg = "Service name must be a non-empty string"
        raise DefinitionError(msg)

    seen: set[str] = set()
    resolved: dict[str, OperationDefinition] = {}
    for key, op in operations.items():
        op_name = op.name or key
        if op_name in seen:
            msg = f"Duplicate operation definition for '{op_name}' in service '{name}'"
            raise DefinitionError(msg)
        seen.add(op_name)
        resolved[key] = OperationDefinition(
            name=op_name,
            input_type=op.input_type,
            output_type=op.output_type,
        )
    return ServiceDefinition(name=name, operations=MappingProxyType(resolved))


def validate_service_definition(definition: ServiceDefinition) -> None:
    """Re-check a definition that may have been assembled by hand.

    Raises:
        DefinitionError: On an empty service or operation name, or a
            duplicated operation name.
    """
    if not isinstance(definition.name, str) or not definition.name:
        msg = "Service name must be a non-empty string"
        raise DefinitionError(msg)

    seen: set[str] = set()
    for key, op in definition.operations.items():
        if not isinstance(op.name, str) or not op.name:
            msg = f"Operation name must be a non-empty string, for key '{key}'"
            raise DefinitionError(msg)
        if op.name in seen:
            msg = (
                f"Operation with name '{op.name}' already registered "
                f"for service '{definition.name}'"
            )
            raise DefinitionError(msg)
        seen.add(op.name)
