"""
Operation catalog: discovery and validation of operation entry points.

Provider modules declare operations as module-level ``async def`` functions
decorated with ``@operation``. build_catalog() scans those modules once at
startup, turns each signature into an OperationDescriptor and rejects anything
the dispatcher could not call safely. The resulting catalog is read-only.

Supported parameter annotations:

    bool / int / float / str     -> boolean / integer / number / string
    typing.Any (JsonValue)       -> opaque JSON, passed through unchanged
    Optional[T], T | None        -> nullable T
    a @dataclass of the above    -> structured record
    Annotated[T, "text"]         -> T, with "text" as the parameter description

Parameters annotated CancellationToken or SessionManager are filled in by the
dispatcher; they are not part of the caller-visible parameter list.
"""

import dataclasses
import enum
import inspect
import logging
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..cancellation import CancellationToken
from ..decorators.operation import OperationMarker, get_operation_marker
from ..errors import CatalogConfigurationError
from ..session.manager import SessionManager

logger = logging.getLogger(__name__)


JsonValue = Any
"""Annotation for parameters that accept any JSON value unchanged."""

NO_DEFAULT = inspect.Parameter.empty


class SemanticType(str, enum.Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    JSON = "json"
    RECORD = "record"


class Injection(str, enum.Enum):
    CANCELLATION = "cancellation"
    SESSION = "session"


_PRIMITIVES = (
    (bool, SemanticType.BOOLEAN),
    (int, SemanticType.INTEGER),
    (float, SemanticType.NUMBER),
    (str, SemanticType.STRING),
)

_INJECTABLE = (
    (CancellationToken, Injection.CANCELLATION),
    (SessionManager, Injection.SESSION),
)


@dataclass(frozen=True)
class ParameterDescriptor:
    """
    One caller-supplied parameter of an operation.

    A parameter is required exactly when it has no default and is not
    nullable. For structured records, `fields` describes the record's own
    fields with the same rules. A record field declared with a
    `default_factory` keeps the factory; binding calls it for every omission.
    """
    name: str
    semantic_type: SemanticType
    nullable: bool = False
    default: Any = NO_DEFAULT
    description: Optional[str] = None
    record_type: Optional[type] = None
    fields: Tuple["ParameterDescriptor", ...] = ()
    default_factory: Optional[Callable[[], Any]] = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT or self.default_factory is not None

    @property
    def required(self) -> bool:
        return not self.has_default and not self.nullable


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Everything the dispatcher needs to validate and run one operation.

    `parameters` lists caller-supplied parameters in declaration order.
    `call_order` lists every parameter name of the function, injected ones
    included, so the bound arguments line up with the declaration.
    """
    name: str
    description: str
    parameters: Tuple[ParameterDescriptor, ...]
    invocable: Callable[..., Awaitable[Any]] = field(repr=False, compare=False)
    mutates_state: bool = False
    injected: Tuple[Tuple[str, Injection], ...] = ()
    call_order: Tuple[str, ...] = ()

    def parameter(self, name: str) -> Optional[ParameterDescriptor]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def injection_for(self, name: str) -> Optional[Injection]:
        for injected_name, kind in self.injected:
            if injected_name == name:
                return kind
        return None

    @property
    def required_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters if p.required)


class OperationCatalog:
    """Read-only name -> OperationDescriptor mapping, in registration order."""

    def __init__(self, descriptors: Iterable[OperationDescriptor] = ()):
        self._operations: Dict[str, OperationDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._operations:
                raise CatalogConfigurationError(
                    f"Duplicate operation name {descriptor.name!r}"
                )
            self._operations[descriptor.name] = descriptor

    def get(self, name: str) -> Optional[OperationDescriptor]:
        return self._operations.get(name)

    def names(self) -> List[str]:
        return list(self._operations)

    def __contains__(self, name) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[OperationDescriptor]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f"OperationCatalog({self.names()!r})"


# ============================================================================
# Annotation analysis
# ============================================================================

def _unwrap_annotated(annotation) -> Tuple[Any, Optional[str]]:
    if typing.get_origin(annotation) is typing.Annotated:
        base, *extras = typing.get_args(annotation)
        description = next((extra for extra in extras if isinstance(extra, str)), None)
        return base, description
    return annotation, None


def _split_optional(annotation) -> Tuple[Any, bool]:
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = typing.get_args(annotation)
        non_null = [arg for arg in args if arg is not type(None)]
        if len(non_null) == 1 and len(args) == 2:
            return non_null[0], True
    return annotation, False


def _injection_for(annotation) -> Optional[Injection]:
    if not isinstance(annotation, type):
        return None
    for injectable, kind in _INJECTABLE:
        if issubclass(annotation, injectable):
            return kind
    return None


def _resolve(annotation) -> Tuple[Any, bool, Optional[str]]:
    """Strip Annotated/Optional wrappers in either nesting order."""
    annotation, description = _unwrap_annotated(annotation)
    annotation, nullable = _split_optional(annotation)
    annotation, inner_description = _unwrap_annotated(annotation)
    return annotation, nullable, description or inner_description


def _analyze_type(annotation, where: str, allow_record: bool = True):
    if annotation is Any:
        return SemanticType.JSON, None, ()

    for py_type, semantic in _PRIMITIVES:
        if annotation is py_type:
            return semantic, None, ()

    if allow_record and isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return SemanticType.RECORD, annotation, _record_fields(annotation, where)

    raise CatalogConfigurationError(f"{where}: unsupported parameter type {annotation!r}")


def _record_fields(record_type: type, where: str) -> Tuple[ParameterDescriptor, ...]:
    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except Exception as e:
        raise CatalogConfigurationError(
            f"{where}: cannot resolve annotations of {record_type.__name__} ({e})"
        ) from e

    fields = []
    for record_field in dataclasses.fields(record_type):
        if not record_field.init:
            continue
        field_where = f"{where}.{record_field.name}"
        base, nullable, description = _resolve(hints[record_field.name])
        semantic, _, _ = _analyze_type(base, field_where, allow_record=False)

        default, default_factory = NO_DEFAULT, None
        if record_field.default is not dataclasses.MISSING:
            default = record_field.default
        elif record_field.default_factory is not dataclasses.MISSING:
            default_factory = record_field.default_factory

        fields.append(ParameterDescriptor(
            name=record_field.name,
            semantic_type=semantic,
            nullable=nullable or default is None,
            default=default,
            description=description,
            default_factory=default_factory,
        ))
    return tuple(fields)


def _default_name(function_name: str) -> str:
    if function_name.endswith("_async") and len(function_name) > len("_async"):
        return function_name[: -len("_async")]
    return function_name


def _default_description(fn, name: str) -> str:
    doc = inspect.getdoc(fn)
    if doc:
        return doc.strip().splitlines()[0].strip()
    return name


# ============================================================================
# Descriptor construction
# ============================================================================

def describe_callable(fn, marker: Optional[OperationMarker] = None) -> OperationDescriptor:
    """
    Build the descriptor for one operation entry point.

    Raises:
        CatalogConfigurationError: if the callable cannot be exposed as an
            operation (not a module-level coroutine function, variadic or
            unannotated parameters, unsupported parameter types).
    """
    marker = marker or get_operation_marker(fn) or OperationMarker()
    label = getattr(fn, "__qualname__", repr(fn))

    if inspect.ismethod(fn) or not inspect.isfunction(fn):
        raise CatalogConfigurationError(
            f"{label}: operations must be plain functions callable without an instance"
        )
    if fn.__qualname__ != fn.__name__:
        raise CatalogConfigurationError(
            f"{label}: operations must be defined at module level"
        )
    if not inspect.iscoroutinefunction(fn):
        raise CatalogConfigurationError(f"{label}: operations must be declared with 'async def'")

    try:
        hints = typing.get_type_hints(fn, include_extras=True)
    except Exception as e:
        raise CatalogConfigurationError(f"{label}: cannot resolve type annotations ({e})") from e

    if hints.get("return", Any) is type(None):
        raise CatalogConfigurationError(f"{label}: operations must return a result value")

    name = marker.name or _default_name(fn.__name__)
    parameters: List[ParameterDescriptor] = []
    injected: List[Tuple[str, Injection]] = []
    call_order: List[str] = []

    for param in inspect.signature(fn).parameters.values():
        where = f"{label}({param.name})"
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise CatalogConfigurationError(f"{where}: variadic parameters are not supported")
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise CatalogConfigurationError(f"{where}: positional-only parameters are not supported")
        if param.name not in hints:
            raise CatalogConfigurationError(f"{where}: missing type annotation")

        base, nullable, description = _resolve(hints[param.name])
        call_order.append(param.name)

        injection = _injection_for(base)
        if injection is not None:
            injected.append((param.name, injection))
            continue

        semantic, record_type, fields = _analyze_type(base, where)
        parameters.append(ParameterDescriptor(
            name=param.name,
            semantic_type=semantic,
            nullable=nullable or param.default is None,
            default=param.default,
            description=description,
            record_type=record_type,
            fields=fields,
        ))

    return OperationDescriptor(
        name=name,
        description=marker.description or _default_description(fn, name),
        parameters=tuple(parameters),
        invocable=fn,
        mutates_state=marker.mutates_state,
        injected=tuple(injected),
        call_order=tuple(call_order),
    )


def _check_class_members(cls: type, module_name: str) -> None:
    for attr_name, member in vars(cls).items():
        target = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
        if get_operation_marker(target) is not None:
            raise CatalogConfigurationError(
                f"{module_name}.{cls.__name__}.{attr_name}: operations must be module-level functions"
            )


def build_catalog(modules: Iterable[types.ModuleType]) -> OperationCatalog:
    """
    Scan provider modules for @operation entry points.

    Operations are registered in module order, then in definition order
    within each module. Callables re-exported from another module are only
    registered by the module that defines them.
    """
    descriptors: List[OperationDescriptor] = []
    for module in modules:
        for obj in list(vars(module).values()):
            if isinstance(obj, type):
                if obj.__module__ == module.__name__:
                    _check_class_members(obj, module.__name__)
                continue

            marker = get_operation_marker(obj)
            if marker is None:
                continue
            if getattr(obj, "__module__", None) != module.__name__:
                continue
            descriptors.append(describe_callable(obj, marker))

    catalog = OperationCatalog(descriptors)
    logger.debug("Built operation catalog with %d operations", len(catalog))
    return catalog


__all__ = [
    "JsonValue",
    "NO_DEFAULT",
    "SemanticType",
    "Injection",
    "ParameterDescriptor",
    "OperationDescriptor",
    "OperationCatalog",
    "describe_callable",
    "build_catalog",
]
