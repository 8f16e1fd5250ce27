"""Operation registry: catalog, schemas, argument coercion and dispatch."""

from .catalog import (
    JsonValue,
    OperationCatalog,
    OperationDescriptor,
    ParameterDescriptor,
    SemanticType,
    build_catalog,
    describe_callable,
)
from .schema import build_input_schema, describe_operation, list_operations
from .coercion import coerce_arguments
from .dispatcher import Dispatcher

__all__ = [
    "JsonValue",
    "OperationCatalog",
    "OperationDescriptor",
    "ParameterDescriptor",
    "SemanticType",
    "build_catalog",
    "describe_callable",
    "build_input_schema",
    "describe_operation",
    "list_operations",
    "coerce_arguments",
    "Dispatcher",
]
