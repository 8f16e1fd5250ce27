"""JSON-Schema style input descriptions and the capability listing."""

from typing import Any, Dict, List

from .catalog import NO_DEFAULT, OperationCatalog, OperationDescriptor, ParameterDescriptor, SemanticType


__all__ = [
    "schema_type_for",
    "build_input_schema",
    "describe_operation",
    "list_operations",
]


_SCHEMA_TYPES = {
    SemanticType.BOOLEAN: "boolean",
    SemanticType.INTEGER: "integer",
    SemanticType.NUMBER: "number",
    SemanticType.STRING: "string",
}


def schema_type_for(param: ParameterDescriptor):
    """
    Schema "type" keyword for a parameter.

    Opaque JSON has no type constraint (None). Everything without a direct
    JSON counterpart, structured records included, is advertised as "string".
    """
    if param.semantic_type is SemanticType.JSON:
        return None
    return _SCHEMA_TYPES.get(param.semantic_type, "string")


def _property_for(param: ParameterDescriptor) -> Dict[str, Any]:
    prop: Dict[str, Any] = {}
    schema_type = schema_type_for(param)
    if schema_type is not None:
        prop["type"] = schema_type
    if param.description:
        prop["description"] = param.description
    if param.default is not NO_DEFAULT and param.default is not None:
        prop["default"] = param.default
    return prop


def build_input_schema(descriptor: OperationDescriptor) -> Dict[str, Any]:
    """
    Object schema for an operation's arguments.

    Only caller-supplied parameters appear. "required" holds exactly the
    parameters without a default that are not nullable, in declaration order.
    """
    return {
        "type": "object",
        "properties": {param.name: _property_for(param) for param in descriptor.parameters},
        "required": list(descriptor.required_names),
    }


def describe_operation(descriptor: OperationDescriptor) -> Dict[str, Any]:
    return {
        "name": descriptor.name,
        "description": descriptor.description,
        "inputSchema": build_input_schema(descriptor),
        "annotations": {
            "title": descriptor.description,
            "readOnlyHint": not descriptor.mutates_state,
            "destructiveHint": descriptor.mutates_state,
            "openWorldHint": True,
        },
    }


def list_operations(catalog: OperationCatalog) -> List[Dict[str, Any]]:
    """Capability listing: one description per operation, in catalog order."""
    return [describe_operation(descriptor) for descriptor in catalog]
