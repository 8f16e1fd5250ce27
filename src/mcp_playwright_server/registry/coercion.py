"""
Binding of raw JSON arguments to an operation's declared parameters.

Clients frequently send numbers and booleans as strings ("800", "true"), so
every primitive accepts both its native JSON form and a string rendition.
Missing parameters fall back to their default, then to None when nullable;
anything else is a MissingArgumentError. Unknown keys are ignored.
"""

import json
import math
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional

from ..cancellation import CancellationToken
from ..errors import ArgumentTypeError, MissingArgumentError
from .catalog import Injection, OperationDescriptor, ParameterDescriptor, SemanticType


__all__ = [
    "coerce_arguments",
    "coerce_value",
]


_INTEGER_RE = re.compile(r"[+-]?\d+")
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

_TYPE_WORDS = {
    SemanticType.BOOLEAN: "boolean",
    SemanticType.INTEGER: "integer",
    SemanticType.NUMBER: "number",
    SemanticType.STRING: "string",
    SemanticType.RECORD: "object",
}


def _to_boolean(value, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ArgumentTypeError(name, "boolean")


def _to_integer(value, name: str) -> int:
    if isinstance(value, bool):
        raise ArgumentTypeError(name, "integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_RE.fullmatch(value.strip()):
        try:
            return int(value.strip())
        except ValueError:
            # Longer than the interpreter's int string conversion limit.
            raise ArgumentTypeError(name, "integer") from None
    raise ArgumentTypeError(name, "integer")


def _to_number(value, name: str) -> float:
    if isinstance(value, bool):
        raise ArgumentTypeError(name, "number")
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            raise ArgumentTypeError(name, "number") from None
    if isinstance(value, float) and math.isfinite(value):
        return value
    if isinstance(value, str) and _NUMBER_RE.fullmatch(value.strip()):
        parsed = float(value.strip())
        if math.isfinite(parsed):
            return parsed
    raise ArgumentTypeError(name, "number")


def _to_string(value, name: str) -> str:
    if isinstance(value, str):
        return value
    raise ArgumentTypeError(name, "string")


def _to_record(value, param: ParameterDescriptor, name: str):
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ArgumentTypeError(name, "object") from None
    if not isinstance(value, Mapping):
        raise ArgumentTypeError(name, "object")

    values = _bind_parameters(param.fields, value, prefix=f"{name}.")
    return param.record_type(**values)


def coerce_value(value: Any, param: ParameterDescriptor, name: Optional[str] = None) -> Any:
    """
    Convert one raw JSON value to the parameter's declared type.

    Raises:
        ArgumentTypeError: the value does not fit the declared type.
    """
    name = name or param.name
    semantic = param.semantic_type

    if semantic is SemanticType.JSON:
        return value
    if value is None:
        if param.nullable:
            return None
        raise ArgumentTypeError(name, _TYPE_WORDS[semantic])

    if semantic is SemanticType.BOOLEAN:
        return _to_boolean(value, name)
    if semantic is SemanticType.INTEGER:
        return _to_integer(value, name)
    if semantic is SemanticType.NUMBER:
        return _to_number(value, name)
    if semantic is SemanticType.STRING:
        return _to_string(value, name)
    return _to_record(value, param, name)


def _bind_parameters(params, arguments: Mapping, prefix: str = "") -> Dict[str, Any]:
    bound: Dict[str, Any] = {}
    for param in params:
        qualified = prefix + param.name
        if param.name in arguments:
            bound[param.name] = coerce_value(arguments[param.name], param, qualified)
        elif param.default_factory is not None:
            bound[param.name] = param.default_factory()
        elif param.has_default:
            bound[param.name] = param.default
        elif param.nullable:
            bound[param.name] = None
        else:
            raise MissingArgumentError(qualified)
    return bound


def coerce_arguments(
    descriptor: OperationDescriptor,
    arguments: Optional[Mapping] = None,
    cancellation: Optional[CancellationToken] = None,
    session=None,
) -> Dict[str, Any]:
    """
    Build keyword arguments for `descriptor.invocable`, in declaration order.

    Injected parameters receive `cancellation` / `session` directly. All-or-
    nothing: the first failing parameter raises and nothing is returned.

    Raises:
        ArgumentTypeError: `arguments` is not an object, or a value has the
            wrong type.
        MissingArgumentError: a required parameter is absent.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ArgumentTypeError("arguments", "object")

    supplied = _bind_parameters(descriptor.parameters, arguments)

    bound: Dict[str, Any] = {}
    for name in descriptor.call_order:
        injection = descriptor.injection_for(name)
        if injection is Injection.CANCELLATION:
            bound[name] = cancellation
        elif injection is Injection.SESSION:
            bound[name] = session
        else:
            bound[name] = supplied[name]
    return bound
