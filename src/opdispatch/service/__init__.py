"""Service contracts — declarative service and operation definitions."""

from opdispatch.service.definition import (
    OperationDefinition,
    PartialOperation,
    ServiceDefinition,
    operation,
    service,
    validate_service_definition,
)

__all__ = [
    "OperationDefinition",
    "PartialOperation",
    "ServiceDefinition",
    "operation",
    "service",
    "validate_service_definition",
]
