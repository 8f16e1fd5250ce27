# mcp_playwright_server/decorators/operation.py
"""
Declarative marker for operation entry points.

The decorator does not wrap the function; it only attaches metadata that
registry.catalog.build_catalog() picks up when it scans provider modules.
Validation of the signature happens there, so a malformed entry point fails
catalog construction rather than a call.
"""

from dataclasses import dataclass
from typing import Callable, Optional


__all__ = [
    "OPERATION_MARKER",
    "OperationMarker",
    "operation",
    "get_operation_marker",
]


OPERATION_MARKER = "__mcp_operation__"


@dataclass(frozen=True)
class OperationMarker:
    name: Optional[str] = None
    description: Optional[str] = None
    mutates_state: bool = False


def operation(
    _func: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    mutates_state: bool = False,
):
    """
    Mark an async module-level function as a callable operation.

    Args:
        name: Public operation name. Defaults to the function name with a
            trailing "_async" removed.
        description: Human-readable description. Defaults to the first line
            of the docstring.
        mutates_state: True for operations that change the page, the session
            or the filesystem. Drives the read-only/destructive hints.

    Usable bare (@operation) or with arguments (@operation(mutates_state=True)).
    """
    def decorator(fn):
        setattr(fn, OPERATION_MARKER, OperationMarker(
            name=name,
            description=description,
            mutates_state=mutates_state,
        ))
        return fn

    return decorator if _func is None else decorator(_func)


def get_operation_marker(obj) -> Optional[OperationMarker]:
    marker = getattr(obj, OPERATION_MARKER, None)
    return marker if isinstance(marker, OperationMarker) else None
